"""sitemap_monitor.crawler: HTTP-доступ к сайтам."""
