"""Content ideas with full creative briefs.

Each news topic becomes an idea per content format (short-form, long-form,
blog) with hooks, per-platform tips, a visual direction rating, an outline
and hashtags, written by Claude Haiku in the brand voice.
"""

import logging
import time
from typing import Any, Callable, Dict, List, Optional

import httpx
from pydantic import BaseModel, ValidationError

from .llm import HAIKU, LLMError, extract_json, generate_text
from .models import PlatformTip, VisualDirection

logger = logging.getLogger(__name__)

PLATFORMS_BY_CATEGORY: Dict[str, List[str]] = {
    "short-form": ["Instagram Reel", "Instagram Carousel", "YouTube Short", "LinkedIn"],
    "long-form": ["YouTube"],
    "blog": ["Substack", "Medium", "LinkedIn Article"],
}

CONTENT_TYPE_CONTEXT: Dict[str, str] = {
    "short-form": """
SHORT-FORM CONTENT CONTEXT (Instagram focus, recycled to YouTube Shorts & LinkedIn):
- Focus: Artistic abstraction of concepts, creative potential of tools and AI
- Primary Platform: Instagram (Reels, Carousels, Stories)
- Secondary: YouTube Shorts, LinkedIn
- Style: Visual-first storytelling, curiosity-sparking, bite-sized wisdom
- Instagram Reel: 30-90 seconds, vertical 9:16, hook in first 2 seconds
- Instagram Carousel: 5-10 slides, square or 4:5, first slide is hook
- YouTube Short: 60 seconds max, vertical, pattern interrupt opening
- LinkedIn: Professional angle, thought leadership tie-in
""",
    "long-form": """
LONG-FORM CONTENT CONTEXT (YouTube main channel):
- Focus: Deep dives into concepts, tutorials for beginners to experts, thought leadership
- Primary Platform: YouTube
- Structure: Hook (5s) → Context/Problem (1-2min) → Core Value/Solution (3-5min) → Technical Deep Dive (2-3min) → CTA (30s)
- Sweet spot: 6-12 minutes
- Visual: Screen recordings with picture-in-picture, B-roll, chapter markers
- Goal: Help viewers gain an edge, feel they're learning from experts who elevate their work
""",
    "blog": """
BLOG CONTENT CONTEXT (Substack, Medium, LinkedIn):
- Focus: Thought leadership, simplifying complex topics, demystifying creative workflows
- AI is a highlight but not always the focus
- Primary: Substack (real-time experiments, learning-in-public)
- Secondary: Medium (frameworks, industry analysis), LinkedIn Article (professional reach)
- Structure: Problem → Framework → Case Studies → Future Implications → CTA
- Substack: 2-5 min reads, quick experiments, "just tried X, here's what happened"
- Medium: 4-10 min reads, authoritative but accessible, SEO-optimized
- LinkedIn Article: Professional angle, statistics for credibility
""",
}

BRAND_VOICE_CONTEXT = """
OPEN SESSION BRAND VOICE:
- We're interdisciplinary designers democratizing Fortune 500-level design through AI, education, and community
- Voice: Expert but humble, technical but accessible, visionary but realistic
- Personality: Relatable, cool, creative, intelligent
- Use "we" not "I"
- Never: Condescend, overhype, gatekeep knowledge
- Always: Teach, experiment, share openly
- Balance expertise with approachability
- Make readers feel they're gaining an edge
"""

VISUAL_DIRECTION_SCALE = """
VISUAL DIRECTION RATING SCALE (1-10):
1-2 (Basic): Clean, minimal, professional. Safe brand colors. Standard layouts.
3-4 (Conservative): Refined typography, subtle gradients. Elegant but expected.
5-6 (Modern): Dynamic compositions, motion graphics. Current design trends.
7-8 (Bold): Experimental typography, unexpected color combinations. Pattern-breaking.
9-10 (Radical): Avant-garde, conceptual art approach. Challenges norms. High risk, high reward.
"""

DEFAULT_HASHTAGS = (
    "#design #creativecoding #AIdesign #designsystems #UXdesign #branding "
    "#creativetechnology #opensession #designtips #workflow"
)

FALLBACK_OUTLINES: Dict[str, List[str]] = {
    "short-form": [
        "Hook: Pattern interrupt opening",
        "Problem: Quick pain point",
        "Solution: Key insight in 15 seconds",
        "Demo: Show it working",
        "CTA: Follow for more",
    ],
    "long-form": [
        "Hook: Visual + compelling statement (5s)",
        "Context: Why this matters (1-2 min)",
        "Core Value: Main teaching (3-5 min)",
        "Deep Dive: Technical details (2-3 min)",
        "Conclusion: Next steps + CTA (30s)",
    ],
    "blog": [
        "Introduction: Hook + problem statement",
        "Context: Why this matters now",
        "Framework: Your unique approach",
        "Examples: Real applications",
        "Conclusion: Key takeaways + CTA",
    ],
}


class CreativeBrief(BaseModel):
    hooks: List[str]
    platformTips: List[PlatformTip]
    visualDirection: VisualDirection
    exampleOutline: List[str]
    hashtags: str


def _platform_block(platform: str) -> str:
    return f"""    {{
      "platform": "{platform}",
      "tips": [
        "Specific tip for {platform}",
        "Another tip for {platform}",
        "Third tip for {platform}"
      ]
    }}"""


def build_idea_prompt(title: str, description: str, category: str, sources: List[Dict[str, str]]) -> str:
    platforms = PLATFORMS_BY_CATEGORY[category]
    source_list = "\n".join(f"- {s['name']}: {s['url']}" for s in sources)
    platform_json = ",\n".join(_platform_block(p) for p in platforms)
    return f"""{BRAND_VOICE_CONTEXT}

{CONTENT_TYPE_CONTEXT[category]}

{VISUAL_DIRECTION_SCALE}

---

Generate a complete creative brief for this content idea:

TITLE: {title}
DESCRIPTION: {description}
CATEGORY: {category}
SOURCES:
{source_list}

Provide your response in this EXACT JSON format:
{{
  "hooks": [
    "First attention-grabbing hook (5-10 words max)",
    "Second alternative hook",
    "Third alternative hook"
  ],
  "platformTips": [
{platform_json}
  ],
  "visualDirection": {{
    "rating": 7,
    "description": "Describe the visual approach: color mood, composition style, typography treatment, motion/animation notes, aesthetic references"
  }},
  "exampleOutline": [
    "Section 1: Hook/Opening",
    "Section 2: Context/Problem",
    "Section 3: Core content",
    "Section 4: Key insight",
    "Section 5: CTA"
  ],
  "hashtags": "#hashtag1 #hashtag2 #hashtag3 #hashtag4 #hashtag5 #hashtag6 #hashtag7 #hashtag8 #hashtag9 #hashtag10"
}}

IMPORTANT:
- Hooks must be punchy, curiosity-sparking, and under 10 words
- Platform tips must be specific and actionable for that exact platform
- Visual direction rating should match the topic's potential (design topics can be bolder)
- Outline should match the content type structure
- Include 10-15 relevant hashtags for discoverability
- Output ONLY valid JSON, no markdown or explanation"""


def fallback_idea(title: str, description: str, category: str) -> Dict[str, Any]:
    lead = " ".join(title.split(" ")[:3])
    return {
        "hooks": [
            f"This changes everything about {lead}...",
            f"What nobody tells you about {lead}",
            "We tested this so you don't have to",
        ],
        "platformTips": [
            {
                "platform": platform,
                "tips": [
                    f"Optimize for {platform}'s algorithm by posting at peak hours",
                    f"Use native features specific to {platform}",
                    "Engage with comments in the first hour",
                ],
            }
            for platform in PLATFORMS_BY_CATEGORY[category]
        ],
        "visualDirection": {
            "rating": 5,
            "description": (
                "Modern, clean aesthetic with brand colors. Professional but approachable. "
                "Consider subtle motion graphics to add visual interest."
            ),
        },
        "exampleOutline": list(FALLBACK_OUTLINES[category]),
        "hashtags": DEFAULT_HASHTAGS,
    }


def generate_rich_idea(
    title: str,
    description: str,
    category: str,
    sources: List[Dict[str, str]],
) -> Dict[str, Any]:
    """Creative brief for one idea; any failure yields the generic brief."""
    prompt = build_idea_prompt(title, description, category, sources)
    try:
        result = generate_text(prompt, model=HAIKU, max_tokens=1500, temperature=0.8)
        parsed = extract_json(result.text)
        if not parsed:
            raise ValueError("No valid JSON found in response")
        brief = CreativeBrief.model_validate(parsed)
    except (LLMError, httpx.HTTPError, ValueError, ValidationError) as e:
        logger.warning("rich idea generation failed for %r: %s", title[:40], e)
        return fallback_idea(title, description, category)
    return brief.model_dump()


def generate_ideas_batch(
    topics: List[Dict[str, Any]],
    category: str,
    max_ideas: int = 5,
    delay: float = 0.5,
    on_progress: Optional[Callable[[int, int], None]] = None,
) -> List[Dict[str, Any]]:
    to_process = topics[:max_ideas]
    ideas: List[Dict[str, Any]] = []
    for i, topic in enumerate(to_process):
        logger.info("generating %s idea %d/%d: %s", category, i + 1, len(to_process), topic["title"][:40])
        brief = generate_rich_idea(topic["title"], topic["description"], category, topic.get("sources") or [])
        ideas.append({
            "title": topic["title"],
            "description": topic["description"],
            "starred": i == 0,
            "sources": topic.get("sources") or [],
            **brief,
        })
        if on_progress:
            on_progress(i + 1, len(to_process))
        if i < len(to_process) - 1 and delay > 0:
            time.sleep(delay)
    return ideas


TRANSFORM_PROMPT = """{voice}

Given this news topic, create three different content angles - one for each format:

NEWS TOPIC: {title}
DESCRIPTION: {description}

Transform this into creative content ideas. Output ONLY valid JSON:

{{
  "shortForm": {{
    "title": "Short-form title (Instagram focus, artistic abstraction angle)",
    "description": "2 sentence description for carousel/reel concept"
  }},
  "longForm": {{
    "title": "Long-form title (YouTube deep dive or tutorial angle)",
    "description": "2 sentence description for video concept"
  }},
  "blog": {{
    "title": "Blog title (thought leadership, simplifying complexity angle)",
    "description": "2 sentence description for article concept"
  }}
}}

Make each angle unique and optimized for its platform. Be creative and specific."""


def _fallback_angles(title: str) -> Dict[str, Dict[str, str]]:
    lower = title.lower()
    return {
        "shortForm": {
            "title": f"Carousel: {' '.join(title.split(' ')[:5])} explained",
            "description": f"Visual breakdown of {lower} for designers.",
        },
        "longForm": {
            "title": f"Deep Dive: {title}",
            "description": f"Complete walkthrough of {lower} with practical examples.",
        },
        "blog": {
            "title": f"What {title} Means for Designers",
            "description": f"Breaking down {lower} and why it matters for creative professionals.",
        },
    }


def transform_topic_to_ideas(topic: Dict[str, Any]) -> Dict[str, Dict[str, str]]:
    """One angle per format (``shortForm``, ``longForm``, ``blog``) for a news topic."""
    prompt = TRANSFORM_PROMPT.format(voice=BRAND_VOICE_CONTEXT, title=topic["title"], description=topic.get("description") or "")
    try:
        result = generate_text(prompt, model=HAIKU, max_tokens=500, temperature=0.7)
    except (LLMError, httpx.HTTPError) as e:
        logger.warning("topic transform failed: %s", e)
        return _fallback_angles(topic["title"])
    parsed = extract_json(result.text)
    if not all(isinstance(parsed.get(k), dict) for k in ("shortForm", "longForm", "blog")):
        return _fallback_angles(topic["title"])
    return parsed


def estimate_idea_cost(idea_count: int) -> Dict[str, Any]:
    prompt_tokens, completion_tokens = 800, 600
    cost = idea_count * prompt_tokens / 1_000_000 * 0.25 + idea_count * completion_tokens / 1_000_000 * 1.25
    return {
        "estimated_cost_usd": round(cost * 100) / 100,
        "breakdown": f"{idea_count} ideas x ~{prompt_tokens + completion_tokens} tokens = ~${cost:.4f}",
    }
