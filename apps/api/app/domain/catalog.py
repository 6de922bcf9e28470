"""Curated, non-exhaustive lists offered to job intake forms."""

DEVICE_TYPES: tuple[str, ...] = (
    "iPhone",
    "Samsung",
    "OnePlus",
    "Xiaomi",
    "Oppo",
    "Vivo",
    "Realme",
    "MacBook",
    "Dell Laptop",
    "HP Laptop",
    "Lenovo Laptop",
    "iPad",
    "Android Tablet",
)

ISSUE_TYPES: tuple[str, ...] = (
    "Screen Replacement",
    "Battery Replacement",
    "Charging Port Issue",
    "Camera Repair",
    "Speaker Issue",
    "Software Issue",
    "Water Damage",
    "Back Panel Replacement",
    "Button Repair",
    "General Diagnosis",
)

TIME_SLOTS: tuple[str, ...] = (
    "9:00-10:00 AM",
    "10:00-11:00 AM",
    "11:00-12:00 PM",
    "12:00-1:00 PM",
    "1:00-2:00 PM",
    "2:00-3:00 PM",
    "3:00-4:00 PM",
    "4:00-5:00 PM",
    "5:00-6:00 PM",
    "6:00-7:00 PM",
)
