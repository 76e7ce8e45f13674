from django.core.management.base import BaseCommand

from events.models import Event
from events.services import create_event

DEMO_EVENTS = [
    {
        "category": "Auth",
        "action": "finish_signup",
        "action_description": "User completed the sign-up form",
        "name": "signup_completed",
        "value_description": "Number of successful sign-ups",
        "platforms": ["web", "ios", "android"],
        "properties": [
            {"name": "userId", "type": "string", "required": True, "description": "Unique user id"},
            {"name": "method", "type": "string", "required": True, "description": "email, google or apple"},
        ],
    },
    {
        "category": "E-commerce",
        "action": "click_checkout",
        "action_description": "Checkout button pressed in the cart",
        "name": "checkout_started",
        "value_description": "Cart total before discounts",
        "platforms": ["web", "ios", "android"],
        "properties": [
            {"name": "cartValue", "type": "number", "required": True, "description": "Cart total"},
            {"name": "itemCount", "type": "number", "required": True, "description": "Number of items"},
        ],
    },
    {
        "category": "Stability",
        "action": "crash",
        "action_description": "Sent automatically on an unhandled exception",
        "name": "app_crashed",
        "value_description": "Error code",
        "platforms": ["ios", "android"],
        "notes": "Stack trace property is not sent in production yet",
        "properties": [
            {"name": "screen", "type": "string", "required": True, "description": "Screen where the crash happened"},
            {"name": "version", "type": "string", "required": True, "description": "App version"},
        ],
    },
]


class Command(BaseCommand):
    help = "Create a few sample events on an empty tracking plan"

    def add_arguments(self, parser):
        parser.add_argument(
            "--force",
            action="store_true",
            help="Seed even if events already exist (existing category/action pairs are skipped)",
        )

    def handle(self, *args, **options):
        if Event.objects.exists() and not options.get("force"):
            self.stdout.write(self.style.WARNING("Events already exist; nothing to do (use --force)."))
            return

        created = 0
        for data in DEMO_EVENTS:
            if Event.objects.filter(category__name=data["category"], action=data["action"]).exists():
                self.stdout.write(f"Skipping {data['category']} > {data['action']}")
                continue
            create_event(data)
            created += 1
        self.stdout.write(self.style.SUCCESS(f"Created {created} demo event(s)"))
