from __future__ import annotations

import logging
from decimal import Decimal

from sqlalchemy import inspect

from tikaz.domain.common.ids import MenuItemId, RestaurantId
from tikaz.domain.common.money import DEFAULT_CURRENCY, Money
from tikaz.domain.restaurant.entities import (
    WEEKDAYS,
    MenuItem,
    OpeningHours,
    Restaurant,
    RestaurantAddress,
    RestaurantContact,
    RestaurantRating,
)
from tikaz.infrastructure.db.repositories.restaurant_repo import SqlAlchemyRestaurantRepository
from tikaz.infrastructure.db.session import get_engine
from tikaz.infrastructure.observability.logging_config import configure_logging

logger = logging.getLogger(__name__)

REQUIRED_TABLES = {"restaurants", "restaurant_delivery_zones", "menu_items"}

SAMPLE_RESTAURANTS = [
    {
        "id": "rst_001",
        "name": "Chez Tante Marie",
        "description": (
            "Cuisine créole authentique avec des recettes familiales transmises de "
            "génération en génération. Spécialités: cari poulet, rougail saucisse, samosas."
        ),
        "cuisine": "Créole",
        "image": "https://images.unsplash.com/photo-1565299624946-b28f40a0ca4b?w=500",
        "address": ("15 Rue de la République", "Saint-Denis", "97400", "Nord"),
        "contact": ("+262 262 12 34 56", "contact@cheztantemarie.re", "https://cheztantemarie.re"),
        "hours": {"default": ("11:00", "22:00"), "friday": ("11:00", "23:00"), "saturday": ("11:00", "23:00")},
        "zones": ["Nord", "Saint-Denis", "Sainte-Marie"],
        "delivery_fee": "3.50",
        "minimum_order": "15.00",
        "rating": (4.8, 156),
        "featured": True,
        "tags": ["Créole", "Authentique", "Familial", "Épicé"],
        "menu": [
            ("Plats Principaux", "Cari Poulet", "Cari de poulet traditionnel avec riz blanc et grains", "12.50", "spicy"),
            ("Plats Principaux", "Rougail Saucisse", "Saucisses fumées aux tomates et piments, riz et grains", "11.00", "spicy"),
            ("Plats Principaux", "Cari Lentilles", "Cari de lentilles aux légumes du pays", "9.50", "vegan"),
            ("Entrées", "Samosas (x6)", "Samosas aux légumes croustillants", "6.00", "vegetarian"),
            ("Entrées", "Bouchons (x4)", "Petits pains vapeur à la viande", "5.50", ""),
            ("Desserts", "Gâteau Patate Douce", "Gâteau traditionnel à la patate douce", "4.50", "vegetarian"),
        ],
    },
    {
        "id": "rst_002",
        "name": "Le Jardin Tropical",
        "description": (
            "Restaurant gastronomique mettant en valeur les produits locaux avec une "
            "touche moderne. Vue panoramique sur l'océan."
        ),
        "cuisine": "Gastronomique",
        "image": "https://images.unsplash.com/photo-1514933651103-005eec06c04b?w=500",
        "address": ("25 Boulevard de l'Océan", "Saint-Gilles", "97434", "Ouest"),
        "contact": ("+262 262 24 35 67", "reservation@jardintropical.re", "https://jardintropical.re"),
        "hours": {
            "default": ("18:00", "23:00"),
            "monday": None,
            "friday": ("18:00", "23:30"),
            "saturday": ("18:00", "23:30"),
            "sunday": ("18:00", "22:30"),
        },
        "zones": ["Ouest", "Saint-Gilles", "L'Hermitage"],
        "delivery_fee": "5.00",
        "minimum_order": "25.00",
        "rating": (4.6, 89),
        "featured": True,
        "tags": ["Gastronomique", "Vue mer", "Produits locaux", "Romantique"],
        "menu": [
            ("Entrées", "Carpaccio de Bonite", "Fines tranches de bonite, vinaigrette aux agrumes locaux", "16.00", ""),
            ("Plats Principaux", "Dorade à la Vanille Bourbon", "Dorade grillée, sauce vanille Bourbon, légumes du jardin", "28.00", ""),
            ("Plats Principaux", "Médaillon de Bœuf aux Épices", "Bœuf local aux épices créoles, gratin de patate douce", "32.00", "spicy"),
        ],
    },
    {
        "id": "rst_003",
        "name": "Pizza Corner 974",
        "description": (
            "Pizzas artisanales avec des ingrédients frais et locaux. "
            "Pâte fait maison quotidiennement."
        ),
        "cuisine": "Italien",
        "image": "https://images.unsplash.com/photo-1513104890138-7c749659a591?w=500",
        "address": ("8 Rue du Commerce", "Saint-Pierre", "97410", "Sud"),
        "contact": ("+262 262 25 36 78", "commande@pizzacorner974.re", None),
        "hours": {"default": ("17:00", "22:30"), "friday": ("17:00", "23:00"), "saturday": ("17:00", "23:00")},
        "zones": ["Sud", "Saint-Pierre", "Le Tampon"],
        "delivery_fee": "2.50",
        "minimum_order": "12.00",
        "rating": (4.4, 203),
        "featured": False,
        "tags": ["Pizza", "Artisanal", "Livraison rapide", "Fait maison"],
        "menu": [
            ("Pizzas Classiques", "Pizza Margherita", "Tomate, mozzarella, basilic frais", "11.50", "vegetarian"),
            ("Pizzas Classiques", "Pizza Reine", "Tomate, mozzarella, jambon, champignons", "13.50", ""),
            ("Pizzas Spéciales 974", "Pizza Tropicale", "Tomate, mozzarella, ananas local, jambon fumé", "15.00", ""),
            ("Pizzas Spéciales 974", "Pizza Créole", "Base rougail, mozzarella, saucisse fumée, piments", "16.50", "spicy"),
        ],
    },
    {
        "id": "rst_004",
        "name": "Sushi Zen",
        "description": (
            "Sushi bar moderne avec poissons ultra-frais de l'océan Indien. "
            "Fusion japonaise-créole unique."
        ),
        "cuisine": "Japonais",
        "image": "https://images.unsplash.com/photo-1579584425555-c3ce17fd4351?w=500",
        "address": ("12 Avenue de la Plage", "Saint-Paul", "97460", "Ouest"),
        "contact": ("+262 262 33 44 55", "commande@sushizen.re", None),
        "hours": {
            "default": ("18:00", "22:00"),
            "monday": None,
            "friday": ("18:00", "22:30"),
            "saturday": ("18:00", "22:30"),
        },
        "zones": ["Ouest", "Saint-Paul", "Le Port"],
        "delivery_fee": "4.00",
        "minimum_order": "20.00",
        "rating": (4.7, 134),
        "featured": True,
        "tags": ["Sushi", "Poisson frais", "Fusion", "Moderne"],
        "menu": [
            ("Sushi & Sashimi", "Plateau Découverte (12 pièces)", "Assortiment de sushi et maki variés", "24.00", ""),
            ("Sushi & Sashimi", "Sashimi Bonite (6 pièces)", "Sashimi de bonite fraîche de l'océan Indien", "18.00", ""),
            ("Spécialités Fusion", "Maki Créole", "Maki au thon épicé, avocat, piment confit", "14.00", "spicy"),
        ],
    },
    {
        "id": "rst_005",
        "name": "Le Glacier des Hauts",
        "description": (
            "Glacier artisanal avec des parfums locaux uniques. Glaces et sorbets aux "
            "fruits tropicaux de La Réunion."
        ),
        "cuisine": "Desserts",
        "image": "https://images.unsplash.com/photo-1488900128323-21503983a07e?w=500",
        "address": ("5 Place du Marché", "Cilaos", "97413", "Cirques"),
        "contact": ("+262 262 31 78 90", "info@glacierdeshauts.re", None),
        "hours": {"default": ("10:00", "19:00"), "friday": ("10:00", "20:00"), "saturday": ("10:00", "20:00")},
        "zones": ["Cirques", "Cilaos", "Entre-Deux"],
        "delivery_fee": "6.00",
        "minimum_order": "10.00",
        "rating": (4.9, 78),
        "featured": False,
        "tags": ["Glace artisanale", "Parfums locaux", "Desserts", "Familial"],
        "menu": [
            ("Glaces Artisanales", "Glace Vanille Bourbon", "Glace à la vanille Bourbon de La Réunion", "3.50", "vegetarian"),
            ("Glaces Artisanales", "Sorbet Letchi", "Sorbet aux letchis frais de saison", "3.50", "vegan"),
            ("Glaces Artisanales", "Glace Coco-Rhum", "Glace coco avec une pointe de rhum arrangé", "4.00", "vegetarian"),
            ("Desserts Glacés", "Coupe Tropicale", "3 boules au choix, fruits exotiques, chantilly", "8.50", "vegetarian"),
        ],
    },
]


def _money(value: str) -> Money:
    return Money.from_decimal(Decimal(value), DEFAULT_CURRENCY)


def _opening_hours(hours: dict) -> dict[str, OpeningHours]:
    result = {}
    for day in WEEKDAYS:
        slot = hours.get(day, hours["default"])
        if slot is None:
            result[day] = OpeningHours(open="", close="", closed=True)
        else:
            result[day] = OpeningHours(open=slot[0], close=slot[1])
    return result


def _menu_item(restaurant_id: str, position: int, row: tuple) -> MenuItem:
    category, name, description, price, flag = row
    return MenuItem(
        item_id=MenuItemId(f"itm_{restaurant_id[4:]}_{position:02d}"),
        category=category,
        name=name,
        description=description,
        price=_money(price),
        is_spicy=flag == "spicy",
        is_vegetarian=flag in {"vegetarian", "vegan"},
        is_vegan=flag == "vegan",
    )


def build_restaurant(data: dict) -> Restaurant:
    street, city, postal_code, zone = data["address"]
    phone, email, website = data["contact"]
    average, count = data["rating"]
    return Restaurant(
        restaurant_id=RestaurantId(data["id"]),
        name=data["name"],
        description=data["description"],
        cuisine=data["cuisine"],
        image_url=data["image"],
        address=RestaurantAddress(street=street, city=city, postal_code=postal_code, zone=zone),
        contact=RestaurantContact(phone=phone, email=email, website=website),
        delivery_zones=list(data["zones"]),
        delivery_fee=_money(data["delivery_fee"]),
        minimum_order=_money(data["minimum_order"]),
        rating=RestaurantRating.from_average(average, count),
        operating_hours=_opening_hours(data["hours"]),
        featured=data["featured"],
        tags=list(data["tags"]),
        menu=[
            _menu_item(data["id"], position, row)
            for position, row in enumerate(data["menu"], start=1)
        ],
    )


def main() -> None:
    configure_logging()
    engine = get_engine(timeout_seconds=2.0)
    if not REQUIRED_TABLES.issubset(set(inspect(engine).get_table_names())):
        logger.warning("seed_skipped", extra={"reason": "no schema yet"})
        return

    repository = SqlAlchemyRestaurantRepository(engine)
    for data in SAMPLE_RESTAURANTS:
        restaurant = build_restaurant(data)
        repository.add(restaurant)
        logger.info("restaurant_seeded", extra={"restaurant_id": str(restaurant.restaurant_id)})

    logger.info("seed_complete", extra={"count": len(SAMPLE_RESTAURANTS)})


if __name__ == "__main__":
    main()
