"""Seeds the category and skill catalogues. Existing names are left alone."""
from app.core.config import settings
from app.database import Database, transaction
from app.models import Category, Skill
from app.repositories import CategoryRepository, SkillRepository

CATEGORIES = [
    ("Software Development", "software-development", "Engineering, programming and QA roles"),
    ("Data Science", "data-science", "Analytics, machine learning and data engineering"),
    ("Design", "design", "Product, UX and visual design"),
    ("Marketing", "marketing", "Growth, content and brand"),
    ("Sales", "sales", "Account management and business development"),
    ("Customer Support", "customer-support", "Support and success teams"),
    ("Finance", "finance", "Accounting, controlling and financial planning"),
    ("Human Resources", "human-resources", "Recruiting and people operations"),
]

SKILLS = {
    "Programming": ["Python", "JavaScript", "TypeScript", "Java", "Go", "C#", "Rust"],
    "Frontend": ["React", "Vue.js", "Angular", "CSS"],
    "Backend": ["FastAPI", "Django", "Node.js", "Spring Boot"],
    "Database": ["PostgreSQL", "MySQL", "MongoDB", "Redis"],
    "DevOps": ["Docker", "Kubernetes", "AWS", "Terraform"],
    "Data": ["SQL", "Pandas", "Machine Learning", "Power BI"],
    "Soft Skills": ["Communication", "Leadership", "Project Management"],
}


def seed(database: Database) -> None:
    with database.session_scope() as db:
        categories = CategoryRepository(db)
        skills = SkillRepository(db)
        with transaction(db):
            created_categories = 0
            for name, slug, description in CATEGORIES:
                if categories.get_by_name(name) or categories.get_by_slug(slug):
                    continue
                categories.add(Category(name=name, slug=slug, description=description))
                created_categories += 1

            created_skills = 0
            for label, names in SKILLS.items():
                for name in names:
                    if skills.get_by_name(name):
                        continue
                    skills.add(Skill(name=name, category=label))
                    created_skills += 1
    print(f"Created {created_categories} categories and {created_skills} skills")


if __name__ == "__main__":
    database = Database(settings.database_url, settings.database_echo)
    database.connect()
    database.create_all()
    try:
        seed(database)
    finally:
        database.dispose()
