"""site_mirror.parser: HTML and CSS reference rewriting."""
