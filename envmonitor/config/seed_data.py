"""
Demo Environments
Records inserted into an empty store on first startup (see SEED_DEMO_DATA) or by
the seed script, so a fresh dashboard has something to show.
"""

DEMO_ENVIRONMENTS = [
    {
        "name": "Production API",
        "url": "126.0.202.9",
        "version": "v2.3.1",
        "status": "working",
        "notes": None,
    },
    {
        "name": None,
        "url": "148.88.88.87",
        "version": "v2.4.0-rc1",
        "status": "degraded",
        "notes": "Database connection pool exhausted - investigating high load",
    },
    {
        "name": None,
        "url": "192.168.1.100",
        "version": None,
        "status": "working",
        "notes": "Recently updated to latest build",
    },
    {
        "name": "QA Environment",
        "url": "https://qa.example.com",
        "version": "v2.3.1",
        "status": "down",
        "notes": "Server maintenance in progress - Expected downtime: 2 hours",
    },
]
