"""Prompt templates for Spark.

All instruction text sent to the LLM lives here as data. Every template
asks for one focused insight and ends the exchange with a question back to
the user.
"""
from typing import Optional

SYSTEM_PROMPT_BASE = """You are Spark, a thinking partner who helps users develop their ideas. You're not a generic assistant — you're a warm provocateur who pushes people to think harder and clearer.

YOUR ROLE:
- Make the user think, don't think for them
- Challenge assumptions without being harsh
- Ask genuine questions, not rhetorical ones
- Reference their specific content, never be generic
- Keep the ball in their court

YOUR TONE:
- Direct but warm — like a smart friend who genuinely wants to help
- Curious and engaged — you find their ideas interesting
- Concise — say what matters, skip the filler
- NOT sycophantic ("Great idea!"), NOT harsh ("This is flawed"), NOT corporate ("Based on my analysis")

CRITICAL RULES:
- EVERY response must end with a genuine question back to the user
- Be concise: 2-5 sentences max, then your question
- One focused insight per response, not a list of observations
- NEVER say you "cannot access URLs" — you have the context provided
- NEVER use markdown headers, bullets, or formatting — plain prose only
- NEVER start with "Based on..." or "Looking at..." — just state your insight
- Reference their actual words, titles, and content — be specific"""

SYSTEM_PROMPT_DRAWER = f"""{SYSTEM_PROMPT_BASE}

CONTEXT:
The user is reviewing an item in their Drawer — a holding area for thoughts and content that haven't been assigned to a specific idea yet. Help them see what's interesting or useful about this item.
If a PDF or image is attached, analyze its actual content — do not just reference the filename."""

NO_THINKING_PLACEHOLDER = "They haven't written their current thinking yet."
NO_ELEMENTS_PLACEHOLDER = "No elements collected yet."

EARLY_STAGE_MAX_ELEMENTS = 3
MATURE_MIN_ELEMENTS = 15


def maturity_note(element_count: int) -> str:
    if element_count <= EARLY_STAGE_MAX_ELEMENTS:
        return (
            f"This is an early-stage idea with only {element_count} elements — "
            "focus on helping them clarify what they're actually exploring."
        )
    if element_count >= MATURE_MIN_ELEMENTS:
        return (
            f"This idea has {element_count} elements — there's substantial "
            "material to synthesize and patterns to surface."
        )
    return ""


def get_system_prompt_with_idea(
    idea_title: str,
    current_thinking: Optional[str],
    elements_summary: str,
    element_count: int,
) -> str:
    """Compose the system prompt for an idea-level spark.

    Preamble, then the idea context, then a maturity hint when the element
    count is at either extreme. Deterministic for identical inputs.
    """
    if current_thinking:
        thinking_block = f'\nTheir current thinking:\n"{current_thinking}"'
    else:
        thinking_block = f"\n{NO_THINKING_PLACEHOLDER}"

    if elements_summary:
        elements_block = f"\nTheir collected elements:\n{elements_summary}"
    else:
        elements_block = f"\n{NO_ELEMENTS_PLACEHOLDER}"

    note = maturity_note(element_count)
    note_block = f"\n{note}" if note else ""

    return (
        f"{SYSTEM_PROMPT_BASE}\n\n"
        "CONTEXT:\n"
        f'The user is developing an idea called "{idea_title}".\n'
        f"{thinking_block}\n"
        f"{elements_block}\n"
        f"{note_block}"
    )


# ── Big sparks (idea-level) ─────────────────────────────────────

SPARK_PROMPTS: dict[str, str] = {
    "synthesize": """Look at my current thinking and the elements I've collected. What's the through-line? Surface a pattern or connection I might not be seeing.

Be specific — reference actual elements. Then ask me a question that helps me clarify or refine my thesis.""",

    "challenge": """Push back on my current thinking. What assumption am I making that might be wrong? What's the weakest part of my reasoning? What am I avoiding or not addressing?

Pick ONE thing to challenge — don't give me a list. Be direct but constructive. Then ask me a question that forces me to defend or revise my position.""",

    "expand": """Based on my current thinking and elements, suggest ONE adjacent territory I should explore. This could be a different angle, an implication I haven't considered, or a connection to something outside what I've collected.

Be specific and concrete — not "consider other perspectives" but an actual direction. Then ask me whether this direction is worth pursuing and why.""",

    "so_what": """Given everything here — my current thinking and all these elements — what's the implication? If my thinking is right, what follows from it? What decision or action does this point toward?

Don't tell me what to do. Surface the "so what" and then ask me what I think the next step should be.""",
}

ACTION_ALIASES: dict[str, str] = {
    "soWhat": "so_what",
    "so-what": "so_what",
}

# Actions answered inline; the reply is returned, not saved as a spark element
MINI_ACTIONS = frozenset({"mini", "summarize", "related"})
CUSTOM_ACTIONS = frozenset({"custom"}) | MINI_ACTIONS

FALLBACK_PROMPT = "What do you think about my idea so far?"
DRAWER_FALLBACK_PROMPT = "What do you think about this?"


def normalize_action(action: Optional[str]) -> str:
    action = (action or "").strip()
    return ACTION_ALIASES.get(action, action)


def get_spark_prompt(action: Optional[str], custom_prompt: Optional[str] = None) -> str:
    """Look up the user prompt for a spark action. Never raises."""
    action = normalize_action(action)
    if action in SPARK_PROMPTS:
        return SPARK_PROMPTS[action]
    if action in CUSTOM_ACTIONS and custom_prompt:
        return custom_prompt
    return FALLBACK_PROMPT


# ── Mini sparks (element-level) ─────────────────────────────────

MINI_SPARK_PROMPTS: dict[str, str] = {
    "summarize": """Summarize this in 2-3 sentences. Capture the core insight or argument, not a comprehensive overview.

Then ask: does this element support, complicate, or change my current thinking on this idea?""",
    "related": """Suggest 2-3 related ideas, questions, or connections worth exploring. Be specific and concise.

Point out which one connects most directly to my current thinking on this idea.""",
}

# Unfiled elements have no idea to relate to
DRAWER_MINI_SPARK_PROMPTS: dict[str, str] = {
    "summarize": "Summarize this concisely in 1-2 sentences. Capture the key insight.",
    "related": "Suggest 2-3 related ideas, questions, or connections worth exploring. Be specific and concise.",
}

MINI_SPARK_KINDS = frozenset(MINI_SPARK_PROMPTS)

LIMITED_CONTEXT_PREFACE = (
    "You only have the title and URL — you haven't read the full content. "
    "Acknowledge this briefly, then infer what you can from the title."
)


def get_mini_spark_prompt(kind: str, has_limited_context: bool, drawer: bool = False) -> str:
    """Task text for a mini spark; raises ValueError for an unknown kind."""
    templates = DRAWER_MINI_SPARK_PROMPTS if drawer else MINI_SPARK_PROMPTS
    if kind not in templates:
        raise ValueError(f"Unknown mini spark: {kind}")
    base_prompt = templates[kind]
    if has_limited_context:
        return f"{LIMITED_CONTEXT_PREFACE}\n\n{base_prompt}"
    return base_prompt


def build_mini_spark_prompt(
    kind: str,
    element_context: str,
    has_limited_context: bool,
    drawer: bool = False,
) -> str:
    """Full mini-spark request: the element block followed by the task."""
    task_prompt = get_mini_spark_prompt(kind, has_limited_context, drawer=drawer)
    header = "[Element context]" if drawer else "[Element]"
    return f"{header}\n{element_context}\n\n[Task]\n{task_prompt}"


def attachment_failure_note(filename: Optional[str], drawer: bool = False) -> str:
    where = "" if drawer else " above"
    return (
        f'\n[Note: The attached file "{filename or "file"}" could not be loaded '
        f"for analysis. Work with whatever context is available{where}.]"
    )
