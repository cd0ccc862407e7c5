"""
Sample venues loaded into an empty in-memory store at startup.
"""

from tablebook.domain.records import Venue

SAMPLE_VENUES = [
    Venue(
        id=1,
        name="Bella Vista",
        cuisine="Italian",
        rating=4.5,
        reviews=324,
        address="123 Teheran-ro, Gangnam-gu, Seoul",
        hours="Open until 22:00",
        price_range="$$$",
        capacity=50,
        phone="02-1234-5678",
        website="www.bellavista.kr",
        description="Tuscan recipes with a modern touch, suited to anniversaries and long dinners.",
        image="https://images.unsplash.com/photo-1722587561829-8a53e1935e20?w=1080",
    ),
    Venue(
        id=2,
        name="Sakura Sushi",
        cuisine="Japanese",
        rating=4.7,
        reviews=567,
        address="456 Nonhyeon-ro, Gangnam-gu, Seoul",
        hours="Open until 23:00",
        price_range="$$$$",
        capacity=30,
        phone="02-2345-6789",
        website="www.sakurasushi.kr",
        description="Omakase courses prepared at the counter by the sushi master.",
        image="https://images.unsplash.com/photo-1639650538773-ffe1d8ad9d3f?w=1080",
    ),
    Venue(
        id=3,
        name="Taco Fiesta",
        cuisine="Mexican",
        rating=4.3,
        reviews=198,
        address="789 Yanghwa-ro, Mapo-gu, Seoul",
        hours="Open until 21:00",
        price_range="$$",
        capacity=40,
        phone="02-3456-7890",
        website="www.tacofiesta.kr",
        description="Tacos, burritos and cocktails in a lively room.",
        image="https://images.unsplash.com/photo-1665541719551-655b587161e4?w=1080",
    ),
    Venue(
        id=4,
        name="Hanok Village",
        cuisine="Korean",
        rating=4.6,
        reviews=412,
        address="234 Bukchon-ro, Jongno-gu, Seoul",
        hours="Open until 22:00",
        price_range="$$$",
        capacity=45,
        phone="02-4567-8901",
        website="www.hanokvillage.kr",
        description="Traditional Korean set menus served in a restored hanok.",
    ),
    Venue(
        id=5,
        name="Le Chef",
        cuisine="French",
        rating=4.8,
        reviews=289,
        address="567 Cheongdam-dong, Gangnam-gu, Seoul",
        hours="Open until 23:00",
        price_range="$$$$",
        capacity=35,
        phone="02-5678-9012",
        website="www.lechef.kr",
        description="Seasonal French tasting menus.",
    ),
]
