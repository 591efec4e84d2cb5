"""Domain keyword tables and the per-domain color palette / personality lookup."""

DOMAIN_PALETTES = {
    "fitness": ["#00D084", "#0A84FF", "#FF9500"],
    "ecommerce": ["#007AFF", "#FF3B30", "#FFD60A"],
    "dashboard": ["#5856D6", "#34C759", "#FF9500"],
    "social": ["#5E5CE6", "#FF2D55", "#30D158"],
    "education": ["#007AFF", "#34C759", "#FFD60A"],
    "healthcare": ["#32ADE6", "#34C759", "#FF9500"],
    "finance": ["#5856D6", "#34C759", "#FFD60A"],
    "default": ["#007AFF", "#5856D6", "#34C759"],
}

DOMAIN_PERSONALITIES = {
    "fitness": "motivational",
    "ecommerce": "persuasive",
    "dashboard": "analytical",
    "social": "engaging",
    "education": "encouraging",
    "healthcare": "caring",
    "finance": "trustworthy",
    "default": "professional",
}

# Weighted keywords per domain, scored by manager.classifier
DOMAIN_KEYWORDS = {
    "fitness": {
        "fitness": 4, "workout": 4, "gym": 4, "exercise": 3, "training": 2,
        "calorie": 3, "running": 2, "yoga": 3, "nutrition": 2,
    },
    "ecommerce": {
        "shop": 3, "store": 3, "ecommerce": 4, "e-commerce": 4, "cart": 4,
        "checkout": 4, "product": 3, "catalog": 3, "order": 2, "payment": 2,
    },
    "dashboard": {
        "dashboard": 4, "analytics": 4, "metrics": 3, "chart": 3, "report": 2,
        "kpi": 4, "admin": 2, "monitor": 2, "stats": 2,
    },
    "social": {
        "social": 4, "feed": 3, "post": 2, "comment": 2, "follow": 3,
        "profile": 2, "chat": 2, "friend": 3, "like": 1, "share": 1,
    },
    "education": {
        "education": 4, "course": 4, "lesson": 4, "student": 3, "quiz": 3,
        "learning": 3, "teacher": 3, "school": 3, "classroom": 3,
    },
    "healthcare": {
        "health": 3, "healthcare": 4, "patient": 4, "doctor": 4, "medical": 4,
        "appointment": 3, "clinic": 4, "hospital": 4,
    },
    "finance": {
        "finance": 4, "bank": 4, "budget": 4, "expense": 3, "invoice": 3,
        "payment": 2, "wallet": 3, "investment": 4, "crypto": 3, "trading": 3,
    },
}


def palette_for(domain):
    return DOMAIN_PALETTES.get(domain, DOMAIN_PALETTES["default"])


def personality_for(domain):
    return DOMAIN_PERSONALITIES.get(domain, DOMAIN_PERSONALITIES["default"])
