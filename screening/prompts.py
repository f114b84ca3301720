from .skills import SkillCatalog

SCREENING_TEMPLATE = """
You are an HR Resume Screening System.

Screen the resume for {domain} domain.

Required Skills for {domain}:
{skills}

Return ONLY this short format:

Match Score: XX/100

Selected: YES or NO

Key Strengths:
- ...

Missing Skills:
- ...

Resume:
{resume}
"""


def build_prompt(domain: str, skills_text: str, resume_text: str) -> str:
    """Screening instructions for one resume; same inputs always give the same prompt."""
    return SCREENING_TEMPLATE.format(domain=domain, skills=skills_text, resume=resume_text)


def build_domain_prompt(catalog: SkillCatalog, domain: str, resume_text: str) -> str:
    # raises UnknownDomainError before anything is sent to the LLM
    skills = catalog.skills_for(domain)
    return build_prompt(domain, skills, resume_text)
