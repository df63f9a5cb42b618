"""WallRizz - wallpaper driven desktop theming engine."""
