"""sitemap_monitor.parser: Разбор sitemap.xml, robots.txt и HTML."""
