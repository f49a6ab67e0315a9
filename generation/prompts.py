"""Prompt templates for article and title generation."""

from db.models import ArticleSettings, Project

DEFAULT_CONTENT_TYPE = "Article"
DEFAULT_TONE = "Professional, engaging, and informative"


def _business_context(project: Project) -> str:
    lines = [
        f"- Company: {project.name}",
        f"- Description: {project.description or 'Not provided'}",
    ]
    if project.website_url:
        lines.append(f"- Website: {project.website_url}")
    if project.competitors:
        lines.append(f"- Competitors: {', '.join(project.competitors)}")
    if project.target_audiences:
        lines.append(f"- Target Audience: {', '.join(project.target_audiences)}")
    return "\n".join(lines)


def build_article_prompt(
    project: Project,
    keyword: str,
    content_type: str | None = None,
    settings: ArticleSettings | None = None,
) -> str:
    """Prompt for the article body, in markdown."""
    content_type = content_type or DEFAULT_CONTENT_TYPE
    tone = (settings.tone if settings and settings.tone else None) or DEFAULT_TONE
    min_words = settings.min_words if settings and settings.min_words else 1500
    max_words = settings.max_words if settings and settings.max_words else 2500

    return f"""You are an expert SEO content writer. Write a comprehensive, high-quality article based on the following requirements:

**Business Context:**
{_business_context(project)}

**Article Requirements:**
- Target Keyword: "{keyword}"
- Content Type: {content_type}
- Tone: {tone}
- Length: {min_words}-{max_words} words

**Content Guidelines:**
1. Start with a compelling introduction that hooks the reader
2. Use the target keyword naturally throughout (aim for 1-2% density)
3. Include relevant subheadings (H2, H3) for better readability
4. Provide actionable insights and practical examples
5. Address common pain points of the target audience
6. Include data, statistics, or case studies where relevant
7. End with a strong conclusion and call-to-action

**SEO Best Practices:**
- Use the target keyword in the introduction and conclusion
- Include related keywords and semantic variations
- Write in a clear, scannable format with short paragraphs
- Ensure the content provides genuine value and answers user intent

**Output Format:**
Write the article in markdown format with proper headings and formatting.
DO NOT include a meta title or description - just the article content itself.

Begin writing the article now:"""


def build_title_prompt(keyword: str, content_type: str | None = None) -> str:
    content_type = content_type or DEFAULT_CONTENT_TYPE
    return f"""Based on the keyword "{keyword}" and content type "{content_type}", generate a compelling, SEO-friendly article title.

Requirements:
- Should be engaging and click-worthy
- Include the target keyword naturally
- Keep it under 60 characters for SEO
- Match the content type ({content_type})

Return ONLY the title text, nothing else."""
