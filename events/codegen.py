"""Matomo tracking snippets for an event, one per supported platform."""

SNIPPET_PLATFORMS = ("web", "ios", "android")


def _properties_comment(properties) -> str:
    names = [p.get("name") for p in properties or [] if isinstance(p, dict) and p.get("name")]
    return f"\n// Properties: {', '.join(names)}" if names else ""


def generate_snippet(platform: str, category: str, action: str, name: str = "", properties=None) -> str:
    category = category or "Category"
    action = action or "Action"
    header = f"// {action}{_properties_comment(properties)}"

    if platform == "web":
        name_part = f", '{name}'" if name else ""
        return f"{header}\n_paq.push(['trackEvent', '{category}', '{action}'{name_part}]);"
    if platform == "ios":
        name_part = f', name: "{name}"' if name else ""
        return f'{header}\nMatomoTracker.shared.track(eventWithCategory: "{category}", action: "{action}"{name_part})'
    if platform == "android":
        name_part = f'.name("{name}")' if name else ""
        return f'{header}\nTrackHelper.track().event("{category}", "{action}"){name_part}.with(tracker)'
    return ""


def generate_snippets(event) -> list[dict]:
    return [
        {
            "platform": platform,
            "code": generate_snippet(platform, event.category.name, event.action, event.name, event.properties),
        }
        for platform in event.platforms or []
        if platform in SNIPPET_PLATFORMS
    ]
