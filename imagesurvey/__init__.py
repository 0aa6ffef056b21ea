"""Image-overlay survey editor: authoring, responding and result export."""
