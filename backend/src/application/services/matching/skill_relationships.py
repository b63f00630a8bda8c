"""
Related-skill similarity table used for partial skill matches
"""
from typing import Dict, Iterable


# job skill -> {candidate skill: similarity}
SKILL_RELATIONSHIPS: Dict[str, Dict[str, float]] = {
    # Frontend frameworks
    "react": {"angular": 0.70, "vue": 0.70, "svelte": 0.70, "next.js": 0.85, "nextjs": 0.85},
    "angular": {"react": 0.70, "vue": 0.70, "svelte": 0.70},
    "vue": {"react": 0.70, "angular": 0.70, "svelte": 0.70, "nuxt": 0.85},

    # Languages
    "typescript": {"javascript": 0.90, "js": 0.90, "ts": 1.0},
    "javascript": {"typescript": 0.90, "js": 1.0, "ts": 0.90},
    "python": {"java": 0.50, "c#": 0.50, "csharp": 0.50, "ruby": 0.60},
    "java": {"python": 0.50, "c#": 0.70, "csharp": 0.70, "kotlin": 0.85},
    "c#": {"java": 0.70, "python": 0.50, "csharp": 1.0},
    "csharp": {"java": 0.70, "python": 0.50, "c#": 1.0},

    # Cloud providers
    "aws": {"gcp": 0.70, "azure": 0.70, "google cloud": 0.70, "amazon web services": 1.0},
    "gcp": {"aws": 0.70, "azure": 0.70, "google cloud": 1.0},
    "azure": {"aws": 0.70, "gcp": 0.70, "microsoft azure": 1.0},

    # Databases
    "postgresql": {"mysql": 0.60, "mongodb": 0.60, "postgres": 1.0, "sql": 0.80},
    "mysql": {"postgresql": 0.60, "mongodb": 0.60, "postgres": 0.60, "sql": 0.80},
    "mongodb": {"postgresql": 0.60, "mysql": 0.60, "nosql": 0.80},

    # Management
    "product management": {"program management": 0.60, "project management": 0.70},
    "program management": {"product management": 0.60, "project management": 0.80},
    "project management": {"program management": 0.80, "product management": 0.60},
    "leadership": {"management": 0.80, "team lead": 0.90},
    "management": {"leadership": 0.80, "team lead": 0.70},

    # DevOps / infrastructure
    "docker": {"kubernetes": 0.70, "k8s": 0.70, "containerization": 0.90},
    "kubernetes": {"docker": 0.70, "k8s": 1.0, "containerization": 0.80},
    "terraform": {"cloudformation": 0.70, "pulumi": 0.80, "infrastructure as code": 0.90},

    # Data / ML
    "machine learning": {"deep learning": 0.80, "ml": 1.0, "ai": 0.70, "data science": 0.70},
    "data science": {"machine learning": 0.70, "ml": 0.70, "analytics": 0.60},
}


def related_similarity(job_skill: str, candidate_skills: Iterable[str]) -> float:
    """
    Best similarity between a job skill and any candidate skill.

    Forward lookup (job skill's relations) first, then reverse lookup
    (a candidate skill that lists the job skill). Inputs are expected
    to be normalized (lowercase, trimmed).
    """
    candidate_skills = list(candidate_skills)

    relations = SKILL_RELATIONSHIPS.get(job_skill)
    if relations:
        best = max((relations.get(cs, 0.0) for cs in candidate_skills), default=0.0)
        if best > 0:
            return best

    reverse = 0.0
    for candidate_skill in candidate_skills:
        similarity = SKILL_RELATIONSHIPS.get(candidate_skill, {}).get(job_skill, 0.0)
        reverse = max(reverse, similarity)
    return reverse
