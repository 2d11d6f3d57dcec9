"""Prompt templates for idea generation and market analysis.

Templates use ``str.format`` placeholders and can be replaced from config
(``idea_template`` / ``market_template``).
"""

from __future__ import annotations

from ideaforge.types import IdeaParams

DEFAULT_IDEA_TEMPLATE = """\
Generate {count} innovative senior design project ideas for computer engineering students with these specifications:
Team: 4 students, 2 semesters (8-9 months)
Budget: ${budget}
Complexity: {complexity}
Innovation Level: {innovation}/10 (1=safe/proven, 10=cutting-edge/risky){problem_line}{tech_line}

For each project, provide:
1. **Project Title**: Clear, descriptive name
2. **Description**: 2-3 sentences explaining the concept and target problem
3. **Key Components**: List of required hardware/software components
4. **Technologies**: Specific technologies used
5. **Estimated Cost**: Breakdown of major components
6. **Timeline**: 8-month milestone timeline
7. **Market Appeal**: Target audience and value proposition
8. **Challenges**: Main technical and implementation challenges
9. **Unique Value**: What makes this project special/different
Format each project clearly with headers and bullet points."""

DEFAULT_MARKET_TEMPLATE = """\
Provide a concise market analysis for the following project idea.
Cover: target users, existing competitors or similar products, differentiators,
key assumptions to validate, and an estimated time to a working prototype.
Answer in Markdown with short sections.

Project idea:
{idea}"""


def build_idea_prompt(
    params: IdeaParams,
    count: int = 3,
    template: str | None = None,
) -> str:
    problem = params.problem.strip()
    techs = [t.strip() for t in params.technologies if t.strip()]
    return (template or DEFAULT_IDEA_TEMPLATE).format(
        count=count,
        budget=params.budget.lstrip("$"),
        complexity=params.complexity,
        innovation=params.innovation,
        problem=problem,
        technologies=", ".join(techs),
        problem_line=f"\nProblem to Solve: {problem}" if problem else "",
        tech_line=f"\nPreferred Technologies: {', '.join(techs)}" if techs else "",
    )


def build_market_prompt(idea_markdown: str, template: str | None = None) -> str:
    return (template or DEFAULT_MARKET_TEMPLATE).format(idea=idea_markdown.strip())
