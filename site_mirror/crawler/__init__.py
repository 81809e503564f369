"""site_mirror.crawler: scheduling, fetching and URL → path mapping."""
