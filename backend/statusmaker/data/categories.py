"""
Default categories seeded on first start, one per template category slug.
"""

DEFAULT_CATEGORIES = [
    {
        "name": "Birthday",
        "slug": "birthday",
        "description": "Birthday wishes and celebration statuses",
        "color": "#FF6B6B",
        "icon": "🎂",
        "sort_order": 1,
    },
    {
        "name": "Wedding",
        "slug": "wedding",
        "description": "Wedding invitations, save-the-dates and congratulations",
        "color": "#F7A1C4",
        "icon": "💍",
        "sort_order": 2,
    },
    {
        "name": "Festival",
        "slug": "festival",
        "description": "Greetings for festivals and cultural celebrations",
        "color": "#FFB347",
        "icon": "🪔",
        "sort_order": 3,
    },
    {
        "name": "Quotes",
        "slug": "quotes",
        "description": "Motivational, love and life quotes",
        "color": "#6C5CE7",
        "icon": "💬",
        "sort_order": 4,
    },
    {
        "name": "Anniversary",
        "slug": "anniversary",
        "description": "Anniversary wishes for couples and milestones",
        "color": "#E84393",
        "icon": "💝",
        "sort_order": 5,
    },
    {
        "name": "Graduation",
        "slug": "graduation",
        "description": "Graduation announcements and congratulations",
        "color": "#0984E3",
        "icon": "🎓",
        "sort_order": 6,
    },
    {
        "name": "Holiday",
        "slug": "holiday",
        "description": "Seasonal and public holiday greetings",
        "color": "#00B894",
        "icon": "🎄",
        "sort_order": 7,
    },
    {
        "name": "Business",
        "slug": "business",
        "description": "Promotions, offers and announcements for businesses",
        "color": "#2D3436",
        "icon": "💼",
        "sort_order": 8,
    },
    {
        "name": "Social",
        "slug": "social",
        "description": "Everyday statuses for social media",
        "color": "#00CEC9",
        "icon": "📱",
        "sort_order": 9,
    },
    {
        "name": "General",
        "slug": "general",
        "description": "Templates that fit anywhere",
        "color": "#636E72",
        "icon": "✨",
        "sort_order": 10,
    },
]
