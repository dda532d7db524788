"""
Service type mappings for pet-care place searches.

Each service type maps to Geoapify categories for the category search and
to a free-text query for the text search fallback.
"""

from typing import Dict, List, Optional

SERVICE_TYPE_CATEGORIES: Dict[str, List[str]] = {
    # Many pet shops offer grooming too
    "grooming": ["pet.service", "pet.shop"],
    "shop": ["pet.shop"],
    "retail": ["pet.shop"],
    "check": ["pet.veterinary"],
    "consultation": ["pet.veterinary"],
    "vaccination": ["pet.veterinary"],
    "emergency": ["pet.veterinary"],
    "surgery": ["pet.veterinary"],
    "wellness": ["pet.veterinary"],
    "preventive": ["pet.veterinary"],
    "diagnostic": ["pet.veterinary"],
    "dental": ["pet.veterinary"],
    "therapy": ["pet.veterinary"],
    "veterinary": ["pet.veterinary"],
    "circumcision": ["pet.veterinary"],
    # No dedicated categories, use the general one
    "boarding": ["pet"],
    "shelter": ["pet"],
}

SERVICE_TYPE_QUERIES: Dict[str, str] = {
    "grooming": "pet grooming",
    "shop": "pet shop",
    "retail": "pet store",
    "check": "veterinary clinic",
    "consultation": "veterinary clinic",
    "vaccination": "veterinary clinic",
    "emergency": "veterinary emergency",
    "surgery": "veterinary clinic",
    "wellness": "veterinary clinic",
    "preventive": "veterinary clinic",
    "diagnostic": "veterinary clinic",
    "dental": "veterinary dental",
    "therapy": "veterinary clinic",
    "veterinary": "veterinary clinic",
    "circumcision": "veterinary clinic",
    "boarding": "pet boarding",
    "shelter": "animal shelter",
}


def _normalize(serviceType: str) -> str:
    return serviceType.strip().lower()


def getCategoriesForServiceType(serviceType: str) -> Optional[List[str]]:
    """Geoapify categories for a service type (case-insensitive), None if unknown, dood!"""
    categories = SERVICE_TYPE_CATEGORIES.get(_normalize(serviceType))
    return list(categories) if categories else None


def getSearchQueryForServiceType(serviceType: str) -> str:
    """Free-text query for a service type; unknown types are searched as-is."""
    return SERVICE_TYPE_QUERIES.get(_normalize(serviceType), serviceType.strip())


def listServiceTypes() -> List[str]:
    return sorted(SERVICE_TYPE_CATEGORIES.keys())
