# setup.py
from setuptools import setup, find_packages

setup(
    name="sitemap_monitor",
    version="0.1.0",
    description="Асинхронный монитор sitemap: поиск новых страниц сайтов для ревью",
    packages=find_packages(exclude=["tests", "tests.*"]),
    install_requires=[
        "aiohttp>=3.9",
        "beautifulsoup4>=4.12",
        "lxml>=5.0",
        "pydantic>=2.5",
        "PyYAML>=6.0",
        "click>=8.1",
    ],
    extras_require={
        "test": [
            "pytest>=8.0",
            "pytest-asyncio>=0.23",
        ],
    },
    entry_points={
        "console_scripts": [
            "sitemap-monitor=sitemap_monitor.cli:cli",
        ],
    },
    python_requires=">=3.11",
)
