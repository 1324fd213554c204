"""Prompt templates for Scouts: topic-based provocations."""

SCOUT_SYSTEM_PROMPT = """You are a scout for interesting ideas, trends, and provocations. Your job is to surface thought-provoking observations that make people want to dig deeper, build something new, or challenge the status quo.

You're looking for:
- Interesting tensions or contradictions in how people behave
- Emerging patterns that aren't obvious yet
- Contrarian takes on accepted wisdom
- Surprising research or cultural shifts
- Questions that don't have easy answers
- Opportunities hiding in plain sight
- Things that feel broken or ready for reinvention

Your tone is:
- Provocative but not clickbait
- Specific, not vague
- Curious, not preachy
- Concise — every word matters

Format your provocations as short, punchy statements that invite exploration. They should feel like the start of something — a conversation, an investigation, or a new venture."""

SCOUT_COUNT = 5


def build_generate_prompt(zones: str) -> str:
    return f"""Generate {SCOUT_COUNT} thought-provoking provocations across these topics: {zones}

For each provocation:
- One punchy sentence (under 20 words ideally)
- Should make someone think "there's something deeper here worth exploring"
- Could spark a new product, a piece of writing, a research question, or a business idea
- Should feel like the beginning of something, not a conclusion

Avoid these patterns:
- "It's not X, it's Y" constructions
- Starting with "The most..." or "The real..." or "We don't..."
- Anything that sounds like a TED talk title or LinkedIn post
- Generic observations that apply to everything
- Truisms dressed up as insights

Return as JSON array with this format:
[
  {{ "title": "The provocation text", "zone": "Which topic area" }},
  ...
]

Only return the JSON array, no other text."""


def build_expand_prompt(title: str, zone: str) -> str:
    return f"""Expand on this provocation with 2-3 paragraphs of context:

"{title}"
(Topic: {zone})

Explain:
- What's happening that makes this interesting
- Why it matters or what it reveals
- The tension or question at the heart of it

Write in a thoughtful, exploratory tone. Don't be preachy or prescriptive. End with something that invites further thinking, not a neat conclusion.

Return only the paragraphs, no headers or formatting."""


LENS_PROMPTS: dict[str, str] = {
    "contrarian": "Take a contrarian view on this. What's the opposite take? What would someone who disagrees say? Push back on the premise.",
    "who": "Who is actually exploring or working on this? What companies, researchers, communities, or movements are engaged with this tension? Be specific if you can.",
    "why_now": "Why is this happening now? What changed recently — technologically, culturally, economically — that makes this relevant today in a way it wasn't before?",
    "tension": "What's the core tension here? What are the competing forces or values? Why is this hard to resolve?",
    "sources": "What real articles, research, books, or thinkers have explored this topic? Suggest 2-3 specific sources someone could look up to go deeper. Include names, titles, or publication names where possible.",
}

DEFAULT_LENS = "tension"


def get_lens_prompt(lens: str) -> str:
    return LENS_PROMPTS.get(lens, LENS_PROMPTS[DEFAULT_LENS])


def build_deeper_prompt(title: str, expanded: str, lens: str) -> str:
    return f"""Original provocation: "{title}"

Context: {expanded}

Now go deeper with this lens:
{get_lens_prompt(lens)}

Write 2-3 paragraphs. Be specific and substantive. Return only the paragraphs, no headers."""
