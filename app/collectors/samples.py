"""
Canned review and app metadata used when the storefront yields nothing.

Everything here is fixed data: the same input always produces the same output.
"""
from dataclasses import replace
from typing import List

from app.collectors.models import AppInfo, ReviewRecord

_SAMPLE_REVIEWS = (
    ReviewRecord(
        text="This app is absolutely amazing! I use it every day and it works perfectly. "
             "The interface is clean and intuitive, and all the features I need are easily "
             "accessible. Highly recommend!",
        rating=5, date="2024-01-15", author="Sarah Johnson", helpful=24, source="sample",
    ),
    ReviewRecord(
        text="Great app overall, but there are a few bugs that need fixing. Sometimes it "
             "crashes when I try to upload photos, and the search function could be "
             "improved. Otherwise, it's pretty good.",
        rating=4, date="2024-01-14", author="Mike Chen", helpful=18, source="sample",
    ),
    ReviewRecord(
        text="I've been using this app for months now and it's been a game-changer for me. "
             "The performance is excellent and the customer support team is very "
             "responsive. Love it!",
        rating=5, date="2024-01-13", author="Emily Rodriguez", helpful=31, source="sample",
    ),
    ReviewRecord(
        text="The app is okay, but it's missing some important features that I need for "
             "work. The UI is a bit outdated and could use a modern refresh. Hoping for "
             "updates soon.",
        rating=3, date="2024-01-12", author="David Kim", helpful=12, source="sample",
    ),
    ReviewRecord(
        text="This is the best app I've ever used! Fast, reliable, and packed with useful "
             "features. The developers really know what they're doing. Five stars all the way!",
        rating=5, date="2024-01-11", author="Lisa Thompson", helpful=42, source="sample",
    ),
    ReviewRecord(
        text="Not bad, but could be better. The app works most of the time, but "
             "occasionally freezes. The design is nice though, and it's easy to navigate.",
        rating=3, date="2024-01-10", author="Robert Wilson", helpful=8, source="sample",
    ),
    ReviewRecord(
        text="Excellent app with outstanding performance! I've tried many alternatives but "
             "this one stands out. The features are exactly what I need and the app is "
             "very stable.",
        rating=5, date="2024-01-09", author="Jennifer Lee", helpful=27, source="sample",
    ),
    ReviewRecord(
        text="The app has potential but needs work. There are too many ads and the free "
             "version is very limited. The premium features are expensive for what you get.",
        rating=2, date="2024-01-08", author="Alex Martinez", helpful=15, source="sample",
    ),
    ReviewRecord(
        text="I'm really impressed with this app! It's fast, user-friendly, and has all the "
             "features I was looking for. The developers are constantly improving it too.",
        rating=5, date="2024-01-07", author="Chris Anderson", helpful=33, source="sample",
    ),
    ReviewRecord(
        text="Good app, but the interface could be more intuitive. Some features are hidden "
             "and hard to find. Once you get used to it though, it's quite useful.",
        rating=4, date="2024-01-06", author="Maria Garcia", helpful=19, source="sample",
    ),
)

_KNOWN_APP_NAMES = {
    "com.whatsapp": "WhatsApp Messenger",
    "com.instagram.android": "Instagram",
    "com.twitter.android": "Twitter",
    "com.facebook.katana": "Facebook",
    "com.google.android.youtube": "YouTube",
}

SAMPLE_POOL_SIZE = len(_SAMPLE_REVIEWS)


def generate_sample_reviews(limit: int) -> List[ReviewRecord]:
    """First `min(limit, pool size)` sample reviews, in fixed order."""
    if limit < 1:
        return []
    # copies so callers can't mutate the pool
    return [replace(r) for r in _SAMPLE_REVIEWS[:limit]]


def generate_sample_app_info(app_id: str) -> AppInfo:
    return AppInfo(
        name=_KNOWN_APP_NAMES.get(app_id, "Sample App"),
        developer="Sample Developer",
        category="Communication",
        rating=4.2,
        totalRatings=1500000,
        downloads="1B+",
        size="45MB",
        version="2.23.45.78",
    )
