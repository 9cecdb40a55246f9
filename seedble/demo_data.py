"""Demo dataset: skill catalog, five team members and knowledge circles.

Seeds an empty ``JsonDataStore`` so the UI has candidates to recommend and
reviewers to assign on first run.
"""

from __future__ import annotations

import logging
import re

from seedble.assessment import is_priority
from seedble.data_store import JsonDataStore, StoreSnapshot
from seedble.models import (
    CandidateUser,
    CircleMember,
    KnowledgeCircle,
    Skill,
    SkillCategory,
    UserSkillEntry,
    utcnow,
)


logger = logging.getLogger(__name__)

SENIOR_LEVEL = 4
MID_LEVEL = 3


# ---------------------------------------------------------------------------
# Skill catalog
# ---------------------------------------------------------------------------
_CATALOG: dict[SkillCategory, list[str]] = {
    "technical": [
        "React", "TypeScript", "CSS", "JavaScript", "UI Design", "UX Research",
        "Figma", "Node.js", "Python", "SQL", "REST API", "MongoDB",
        "Machine Learning", "Data Analysis", "TensorFlow",
    ],
    "soft": ["Communication", "Team Leadership", "Problem Solving", "Mentoring"],
    "process": ["Design Thinking", "Agile", "Code Review", "Documentation"],
}


# ---------------------------------------------------------------------------
# Team members: (id, name, role, department, seniority, skills)
# ---------------------------------------------------------------------------
_DEFAULT_MEMBERS: list[tuple[str, str, str, str, str, list[str]]] = [
    ("u01", "Marco Rossi", "Frontend Developer", "Engineering", "Senior",
     ["React", "TypeScript", "CSS", "JavaScript"]),
    ("u02", "Giulia Bianchi", "UX Designer", "Design", "Senior",
     ["UI Design", "UX Research", "Figma", "Design Thinking"]),
    ("u03", "Alessandro Verdi", "Backend Developer", "Engineering", "Senior",
     ["Node.js", "Python", "SQL", "REST API"]),
    ("u04", "Elena Arancio", "Full Stack Developer", "Engineering", "Mid",
     ["React", "Node.js", "MongoDB", "REST API"]),
    ("u05", "Luca Gialli", "Data Scientist", "Data", "Senior",
     ["Python", "Machine Learning", "Data Analysis", "TensorFlow"]),
]

_CIRCLES: list[dict[str, str]] = [
    {
        "id": "c-ai",
        "name": "AI & Machine Learning",
        "description": "Exploring latest trends in artificial intelligence and ML applications",
        "category": "technical",
        "icon": "🧠",
        "color": "#8B5CF6",
    },
    {
        "id": "c-frontend",
        "name": "Frontend Development",
        "description": "Modern web development practices and frameworks",
        "category": "technical",
        "icon": "💻",
        "color": "#3B82F6",
    },
    {
        "id": "c-leadership",
        "name": "Leadership & Management",
        "description": "Developing leadership skills and management techniques",
        "category": "soft",
        "icon": "🎯",
        "color": "#22C55E",
    },
]

_CIRCLE_MEMBERS: dict[str, list[str]] = {
    "c-ai": ["u03", "u05"],
    "c-frontend": ["u01", "u02", "u04"],
    "c-leadership": ["u01", "u03"],
}


def skill_id(name: str) -> str:
    """Stable catalog id for a demo skill name."""
    return "s-" + re.sub(r"[^a-z0-9]+", "-", name.lower()).strip("-")


def build_demo_snapshot() -> StoreSnapshot:
    """The demo dataset, with deterministic ids."""
    now = utcnow()
    skills = [
        Skill(id=skill_id(name), name=name, category=category, description=f"{category} skill: {name}")
        for category, names in _CATALOG.items()
        for name in names
    ]
    users: list[CandidateUser] = []
    entries: list[UserSkillEntry] = []
    for uid, name, role, department, seniority, skill_names in _DEFAULT_MEMBERS:
        users.append(CandidateUser(
            id=uid,
            full_name=name,
            role=role,
            department=department,
            email=f"{name.lower().replace(' ', '.')}@seedble.example",
        ))
        level = SENIOR_LEVEL if seniority == "Senior" else MID_LEVEL
        entries.extend(
            UserSkillEntry(
                user_id=uid,
                skill_id=skill_id(s),
                level=level,
                interest=4,
                is_priority=is_priority(level, 4),
                last_assessed=now,
            )
            for s in skill_names
        )
    return StoreSnapshot(
        users=users,
        skills=skills,
        user_skills=entries,
        knowledge_circles=[KnowledgeCircle(**c) for c in _CIRCLES],
        circle_members=[
            CircleMember(circle_id=cid, user_id=uid)
            for cid, uids in _CIRCLE_MEMBERS.items()
            for uid in uids
        ],
    )


def seed_demo_data(store: JsonDataStore) -> bool:
    """Write the demo dataset into *store* if it is empty.

    Returns:
        True when data was written, False when the store already had data.
    """
    if not store.load().is_empty():
        return False
    store.replace(build_demo_snapshot())
    logger.info("Seeded demo data into %s", store.path)
    return True
