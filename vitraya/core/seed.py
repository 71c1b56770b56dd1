import json
import logging
from datetime import datetime

from sqlalchemy.orm import Session

from vitraya.db.models import Article, Doctor

logger = logging.getLogger("uvicorn.error")

APPOINTMENT_TIME_SLOTS: list[str] = [
    "9:00 AM",
    "9:30 AM",
    "10:00 AM",
    "10:30 AM",
    "11:00 AM",
    "11:30 AM",
    "1:00 PM",
    "1:30 PM",
    "2:00 PM",
    "2:30 PM",
    "3:00 PM",
    "3:30 PM",
    "4:00 PM",
    "4:30 PM",
]

SPECIALTIES: list[str] = [
    "General Practitioner",
    "Cardiologist",
    "Dermatologist",
    "Neurologist",
    "Pediatrician",
    "Orthopedist",
    "Gynecologist",
    "Psychiatrist",
    "Ophthalmologist",
    "Dentist",
]

DEFAULT_DOCTORS: list[dict] = [
    {
        "name": "Jennifer Wilson",
        "specialty": "General Practitioner",
        "hospital": "City Community Hospital",
        "experience": 12,
        "education": "Harvard Medical School",
        "rating": 4.9,
        "description": "Dr. Wilson is a dedicated general practitioner with over 12 years of experience in family medicine.",
        "languages": ["English", "Spanish"],
    },
    {
        "name": "Michael Chen",
        "specialty": "Cardiologist",
        "hospital": "Heart & Vascular Institute",
        "experience": 15,
        "education": "Stanford University School of Medicine",
        "rating": 4.8,
        "description": "Dr. Chen specializes in treating cardiovascular diseases with a patient-centered approach.",
        "languages": ["English", "Mandarin"],
    },
    {
        "name": "Sarah Johnson",
        "specialty": "Dermatologist",
        "hospital": "Skin Health Center",
        "experience": 10,
        "education": "Johns Hopkins University",
        "rating": 4.7,
        "description": (
            "Dr. Johnson is an expert in treating a wide range of skin conditions "
            "and performing cosmetic procedures."
        ),
        "languages": ["English"],
    },
    {
        "name": "David Rodriguez",
        "specialty": "Neurologist",
        "hospital": "Brain & Spine Center",
        "experience": 18,
        "education": "Yale School of Medicine",
        "rating": 4.9,
        "description": "Dr. Rodriguez is a leading neurologist specializing in headache disorders and multiple sclerosis.",
        "languages": ["English", "Spanish", "Portuguese"],
    },
    {
        "name": "Emily Patel",
        "specialty": "Pediatrician",
        "hospital": "Children's Health Center",
        "experience": 8,
        "education": "University of Pennsylvania",
        "rating": 4.8,
        "description": "Dr. Patel is passionate about children's health and provides comprehensive pediatric care.",
        "languages": ["English", "Hindi"],
    },
    {
        "name": "Robert Thompson",
        "specialty": "Orthopedist",
        "hospital": "Sports Medicine & Orthopedic Center",
        "experience": 14,
        "education": "Columbia University",
        "rating": 4.6,
        "description": (
            "Dr. Thompson specializes in sports injuries and joint replacements "
            "with minimally invasive techniques."
        ),
        "languages": ["English"],
    },
    {
        "name": "Lisa Kim",
        "specialty": "Gynecologist",
        "hospital": "Women's Health Institute",
        "experience": 11,
        "education": "University of California, San Francisco",
        "rating": 4.9,
        "description": "Dr. Kim provides comprehensive women's health services with a focus on preventative care.",
        "languages": ["English", "Korean"],
    },
    {
        "name": "James Williams",
        "specialty": "Psychiatrist",
        "hospital": "Mental Health Center",
        "experience": 16,
        "education": "Duke University School of Medicine",
        "rating": 4.7,
        "description": "Dr. Williams specializes in mood disorders and utilizes evidence-based approaches to mental health.",
        "languages": ["English"],
    },
]

DEFAULT_ARTICLES: list[dict] = [
    {
        "title": "10 Ways to Improve Heart Health",
        "category": "Cardio",
        "read_time": "5 min read",
        "content": (
            "Heart disease is the leading cause of death globally. This article explores evidence-based "
            "strategies to improve cardiovascular health, including regular exercise, a heart-healthy diet, "
            "stress management, and regular check-ups."
        ),
        "author": "Dr. Michael Chen",
        "published_at": datetime(2023, 11, 1),
    },
    {
        "title": "The Benefits of Mediterranean Diet",
        "category": "Nutrition",
        "read_time": "7 min read",
        "content": (
            "The Mediterranean diet is consistently ranked as one of the healthiest dietary patterns. Learn "
            "about its key components, health benefits, and how to incorporate it into your daily meals for "
            "better health outcomes."
        ),
        "author": "Emma Wilson, RD",
        "published_at": datetime(2023, 11, 5),
    },
    {
        "title": "How to Maintain Exercise Motivation",
        "category": "Fitness",
        "read_time": "4 min read",
        "content": (
            "Starting an exercise routine is one thing, but maintaining it is another challenge. This article "
            "provides practical strategies to stay motivated, overcome common obstacles, and make physical "
            "activity a consistent part of your lifestyle."
        ),
        "author": "Mark Johnson, CPT",
        "published_at": datetime(2023, 11, 10),
    },
    {
        "title": "Understanding Anxiety: Causes and Coping Strategies",
        "category": "Mental Health",
        "read_time": "8 min read",
        "content": (
            "Anxiety disorders affect millions of people worldwide. This article explains the different types "
            "of anxiety, their symptoms, and provides evidence-based strategies for managing anxiety in daily "
            "life."
        ),
        "author": "Dr. James Williams",
        "published_at": datetime(2023, 11, 15),
    },
    {
        "title": "Sleep Better Tonight: Science-Backed Tips",
        "category": "Wellness",
        "read_time": "6 min read",
        "content": (
            "Quality sleep is essential for physical and mental health. Discover practical, science-backed tips "
            "to improve your sleep hygiene, create an optimal sleep environment, and develop habits that "
            "promote restful sleep."
        ),
        "author": "Dr. Jennifer Wilson",
        "published_at": datetime(2023, 11, 20),
    },
]


def seed_reference_data(db: Session) -> dict[str, int]:
    """Insert the default doctors and articles into empty tables. Returns rows added per table."""
    added = {"doctors": 0, "articles": 0}

    if db.query(Doctor.id).first() is None:
        for item in DEFAULT_DOCTORS:
            fields = {key: value for key, value in item.items() if key != "languages"}
            db.add(Doctor(**fields, languages_json=json.dumps(item["languages"])))
        added["doctors"] = len(DEFAULT_DOCTORS)

    if db.query(Article.id).first() is None:
        for item in DEFAULT_ARTICLES:
            db.add(Article(**item))
        added["articles"] = len(DEFAULT_ARTICLES)

    if added["doctors"] or added["articles"]:
        db.commit()
        logger.info("reference_data_seeded doctors=%s articles=%s", added["doctors"], added["articles"])
    return added
