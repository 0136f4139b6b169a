"""Files shipped with filectl, such as the default color theme."""
