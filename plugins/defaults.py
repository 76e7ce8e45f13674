"""Built-in plugins installed on every deployment."""

ALERTS_PLUGIN_ID = "alerts"
CODE_GENERATOR_PLUGIN_ID = "code-generator"

DEFAULT_MATOMO_URL = "https://analytics.sutochno.ru/index.php"
DEFAULT_SITE_MAPPING = "web:1,ios:2,android:3"
DEFAULT_DROP_THRESHOLD = 30
DEFAULT_MAX_CONCURRENCY = 5

DEFAULT_PLUGINS = [
    {
        "id": CODE_GENERATOR_PLUGIN_ID,
        "name": "Matomo code generator",
        "description": "Generates Matomo tracking snippets for each platform (Web, iOS, Android).",
        "version": "1.0.0",
        "is_enabled": True,
        "config": {"show_for_platforms": ["web", "ios", "android"]},
    },
    {
        "id": "analytics-chart",
        "name": "Analytics chart",
        "description": "Shows a 30-day chart of event counts from the Matomo analytics system.",
        "version": "1.0.0",
        "is_enabled": True,
        "config": {"period": 30},
    },
    {
        "id": "platform-statuses",
        "name": "Platform statuses",
        "description": "Implementation and validation status per platform with a full change history.",
        "version": "1.0.0",
        "is_enabled": True,
        "config": {},
    },
    {
        "id": "comments",
        "name": "Comments",
        "description": "Discussion threads on tracking events.",
        "version": "1.0.0",
        "is_enabled": True,
        "config": {},
    },
    {
        "id": "csv-import",
        "name": "CSV import",
        "description": "Bulk import of events from a CSV file.",
        "version": "1.0.0",
        "is_enabled": True,
        "config": {},
    },
    {
        "id": ALERTS_PLUGIN_ID,
        "name": "Event monitoring",
        "description": "Watches analytics event volumes and raises alerts on significant day-over-day drops.",
        "version": "1.0.0",
        "is_enabled": True,
        "config": {
            "matomo_url": DEFAULT_MATOMO_URL,
            "matomo_token": None,
            "matomo_site_id": DEFAULT_SITE_MAPPING,
            "drop_threshold": DEFAULT_DROP_THRESHOLD,
            "max_concurrency": DEFAULT_MAX_CONCURRENCY,
        },
    },
]
