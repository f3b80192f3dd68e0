from decimal import Decimal

DEFAULT_MENU = [
    {
        "category": "Signature Teas",
        "items": [
            {"name": "Masala Chai", "price": Decimal("25"), "image": "🫖", "is_popular": True,
             "description": "Traditional spiced tea with cardamom, ginger, and cinnamon"},
            {"name": "Green Tea", "price": Decimal("30"), "image": "🍵",
             "description": "Fresh green tea leaves with antioxidants"},
            {"name": "Earl Grey", "price": Decimal("35"), "image": "☕",
             "description": "Classic British tea with bergamot oil"},
        ],
    },
    {
        "category": "Cold Beverages",
        "items": [
            {"name": "Iced Tea", "price": Decimal("40"), "image": "🧊", "is_popular": True,
             "description": "Refreshing iced tea with lemon and mint"},
            {"name": "Lemonade", "price": Decimal("35"), "image": "🍋",
             "description": "Fresh lemon juice with a hint of mint"},
        ],
    },
    {
        "category": "Snacks",
        "items": [
            {"name": "Samosa", "price": Decimal("15"), "image": "🥟", "is_popular": True,
             "description": "Crispy fried pastry with spiced potato filling"},
            {"name": "Sandwich", "price": Decimal("45"), "image": "🥪",
             "description": "Grilled sandwich with vegetables and cheese"},
            {"name": "Biscuits", "price": Decimal("20"), "image": "🍪",
             "description": "Assorted tea biscuits and cookies"},
        ],
    },
]
