"""
Resolve icon names of desktop entries to icon files.
"""
# Stdlib
import os

# 3rd party
import xdg.IconTheme

def get_icon_path(icon_name, size=48, theme=None):
    """
    Return a path, which refers to an icon file with the given name
    regarding to given `size` and `theme`. Return `None` if no icon
    path could be obtained.

    An absolute `icon_name` is returned unchanged if it refers to an
    existing file. PyXDG would return it in any case.
    """
    if not icon_name:
        return None
    if os.path.isabs(icon_name):
        return icon_name if os.path.isfile(icon_name) else None
    return xdg.IconTheme.getIconPath(icon_name, size, theme) or None
