"""DecisionOracle backed by an OpenAI or Anthropic chat model."""

import json
import re
from typing import Dict, Any, List, Optional

from openai import AsyncOpenAI
from anthropic import AsyncAnthropic
from tenacity import retry, stop_after_attempt, wait_exponential

from ..core.decision_oracle import DecisionOracle
from ..core.errors import OracleUnavailable
from ..core.models import RawElement, MeaningfulElement, ClassificationResult, Decision
from ..utils import log, config, summarize_page_text

MAX_PROMPT_ELEMENTS = 100

NOISE_PATTERNS = [
    re.compile(pattern, re.IGNORECASE)
    for pattern in [
        r"\blog ?out\b",
        r"\bsign ?out\b",
        r"\bhelp\b",
        r"\bsupport\b",
        r"\bprivacy\b",
        r"\bterms\b",
        r"\bcookies?\b",
        r"\bsettings\b",
        r"\bpreferences\b",
        r"\bprofile\b",
        r"\blegal\b",
        r"\babout\b",
        r"\bcontact us\b",
        r"\bfaq\b",
        r"(facebook|twitter|linkedin|instagram|youtube)\.com",
    ]
]

SYSTEM_PROMPT = """You are an expert QA automation engineer analyzing a web application to discover meaningful user journeys for test automation.

Explore the application by understanding what each page is for, choosing which element to click next to uncover valuable flows, and recognizing when a journey has reached a meaningful end.

Mark a journey complete when it demonstrates a testable flow: at least 3-4 meaningful clicks, a drill-down into detailed information, or a finished multi-step workflow.

Always answer with a single JSON object and nothing else."""


def is_noise(element: RawElement) -> bool:
    """True for utility elements that never start a business journey."""
    haystack = " ".join(
        part for part in [element.text, element.aria_label, element.href] if part
    )
    return any(pattern.search(haystack) for pattern in NOISE_PATTERNS)


class LLMDecisionOracle(DecisionOracle):
    """Asks a chat model to classify pages and pick the next click."""

    def __init__(self, provider: str = "openai", model: Optional[str] = None):
        """
        Initialize the oracle.

        Args:
            provider: LLM provider ("openai" or "anthropic")
            model: Model name (provider default when omitted)
        """
        self.provider = provider.lower()

        if self.provider == "openai":
            self.client = AsyncOpenAI(api_key=config.openai_api_key)
            self.model = model or "gpt-4o"
        elif self.provider == "anthropic":
            self.client = AsyncAnthropic(api_key=config.anthropic_api_key)
            self.model = model or "claude-3-5-sonnet-20241022"
        else:
            raise ValueError(f"Unsupported provider: {provider}")

    @retry(stop=stop_after_attempt(3), wait=wait_exponential(multiplier=1, min=2, max=10))
    async def _ask(self, prompt: str) -> str:
        """Send one prompt and return the raw text reply."""
        if self.provider == "openai":
            response = await self.client.chat.completions.create(
                model=self.model,
                messages=[
                    {"role": "system", "content": SYSTEM_PROMPT},
                    {"role": "user", "content": prompt}
                ],
                max_tokens=2000,
                temperature=0.1
            )
            return response.choices[0].message.content or ""

        message = await self.client.messages.create(
            model=self.model,
            max_tokens=2000,
            temperature=0.1,
            system=SYSTEM_PROMPT,
            messages=[{"role": "user", "content": prompt}]
        )
        return message.content[0].text

    async def _ask_json(self, prompt: str) -> Dict[str, Any]:
        try:
            response_text = await self._ask(prompt)
        except Exception as e:
            raise OracleUnavailable(f"{self.provider} request failed: {e}") from e
        return self._parse_json(response_text)

    @staticmethod
    def _parse_json(response_text: str) -> Dict[str, Any]:
        """Extract the outermost JSON object from a reply (handles code fences)."""
        json_start = response_text.find('{')
        json_end = response_text.rfind('}') + 1

        if json_start == -1 or json_end == 0:
            log.error(f"Response was: {response_text}")
            raise OracleUnavailable("No JSON found in response")

        try:
            data = json.loads(response_text[json_start:json_end])
        except json.JSONDecodeError as e:
            log.error(f"Response was: {response_text}")
            raise OracleUnavailable(f"Failed to parse LLM response: {e}") from e

        if not isinstance(data, dict):
            raise OracleUnavailable("LLM response is not a JSON object")
        return data

    def _build_classify_prompt(
        self,
        url: str,
        title: str,
        visible_text: str,
        elements: List[RawElement],
        total: int
    ) -> str:
        lines = []
        for index, el in enumerate(elements[:MAX_PROMPT_ELEMENTS]):
            line = f'{index + 1}. [{el.tag_name}] "{el.text}" | selector: {el.selector}'
            if el.aria_label:
                line += f" | aria: {el.aria_label}"
            if el.href:
                line += f" | href: {el.href}"
            lines.append(line)

        return f"""You are analyzing a web page to identify MEANINGFUL elements for test automation.

Page Information:
- URL: {url}
- Title: {title}
- Visible Text Summary: {summarize_page_text(visible_text, 300)}

All Interactable Elements Found ({total} total):
{chr(10).join(lines)}

Your task:
1. Collapse redundant elements: from many similar items (e.g. 50 table rows) keep one or two representatives
2. Prioritize business-critical buttons and links that lead to important user flows
3. Ignore utility elements: logout, help, settings, footers, social media links, cookie banners
4. Summarize the page's purpose in 2-3 sentences

Respond in JSON format:
{{
  "meaningfulElements": [
    {{
      "type": "button|link|input",
      "label": "element text",
      "context": "what clicking this does",
      "selector": "selector copied exactly from the list above",
      "text": "original text",
      "ariaLabel": "aria label if any",
      "href": "href if any"
    }}
  ],
  "pageContext": "2-3 sentence summary of this page's purpose"
}}"""

    def _build_decide_prompt(
        self,
        unvisited: List[MeaningfulElement],
        page_summary: str,
        journey_so_far: List[MeaningfulElement],
        url: str
    ) -> str:
        elements = "\n".join(
            f'{index + 1}. [{el.type}] "{el.label}" - {el.context}'
            for index, el in enumerate(unvisited)
        )
        journey = (
            " ".join(f"→ {el.label}" for el in journey_so_far)
            if journey_so_far else "Just started (no actions yet)"
        )

        return f"""You are guiding test automation exploration.

Current Page:
- URL: {url}
- Context: {page_summary}

Current Journey So Far:
{journey}

Available Unvisited Elements:
{elements}

Decide the next action:
1. CLICK an element to continue exploring (if the journey needs more depth)
2. COMPLETE if this journey already demonstrates a meaningful test flow (3-5 steps recommended)

Respond in JSON format:
{{
  "action": "click" | "complete",
  "elementIndex": 1-based index if clicking,
  "reasoning": "why you made this decision",
  "confidence": 0-100,
  "journeyName": "name if complete",
  "completionReason": "reason if complete"
}}"""

    async def classify(
        self,
        url: str,
        title: str,
        visible_text: str,
        raw_elements: List[RawElement]
    ) -> ClassificationResult:
        candidates = [el for el in raw_elements if not is_noise(el)]
        log.info(
            f"Classifying {url}: {len(raw_elements)} elements, "
            f"{len(raw_elements) - len(candidates)} filtered as noise"
        )

        prompt = self._build_classify_prompt(url, title, visible_text, candidates, len(candidates))
        data = await self._ask_json(prompt)

        known = {el.selector for el in candidates}
        seen = set()
        meaningful: List[MeaningfulElement] = []
        for item in data.get("meaningfulElements") or []:
            if not isinstance(item, dict):
                continue
            selector = item.get("selector")
            if selector not in known:
                log.debug(f"Dropping element with unknown selector: {selector}")
                continue
            if selector in seen:
                continue
            seen.add(selector)
            meaningful.append(MeaningfulElement(
                type=item.get("type") or "element",
                label=item.get("label") or item.get("text") or selector,
                context=item.get("context", ""),
                selector=selector,
                text=item.get("text"),
                accessible_label=item.get("ariaLabel"),
                href=item.get("href")
            ))

        log.info(f"Filtered to {len(meaningful)} meaningful elements")
        return ClassificationResult(
            meaningful_elements=meaningful,
            page_summary=data.get("pageContext", "")
        )

    async def decide_next(
        self,
        meaningful_elements: List[MeaningfulElement],
        page_summary: str,
        journey_so_far: List[MeaningfulElement],
        url: str
    ) -> Decision:
        unvisited = [el for el in meaningful_elements if not el.visited]
        if not unvisited:
            return Decision.complete(
                reasoning="All meaningful elements have been explored from this page",
                confidence=100,
                completion_reason="No more unvisited paths"
            )

        prompt = self._build_decide_prompt(unvisited, page_summary, journey_so_far, url)
        data = await self._ask_json(prompt)

        try:
            confidence = int(data.get("confidence", 0))
        except (TypeError, ValueError):
            confidence = 0
        reasoning = data.get("reasoning", "")

        if data.get("action") == "click":
            index = data.get("elementIndex")
            if not isinstance(index, int) or not 1 <= index <= len(unvisited):
                raise OracleUnavailable(f"LLM chose invalid element index: {index!r}")
            element = unvisited[index - 1]
            log.info(f"LLM decided to click '{element.label}' ({confidence}%)")
            return Decision.click(
                selector=element.selector,
                reasoning=reasoning,
                confidence=confidence,
                element_description=element.label
            )

        if data.get("action") == "complete":
            log.info(f"LLM completed journey: {data.get('journeyName')}")
            return Decision.complete(
                reasoning=reasoning,
                confidence=confidence,
                journey_name=data.get("journeyName"),
                completion_reason=data.get("completionReason")
            )

        raise OracleUnavailable(f"LLM returned unknown action: {data.get('action')!r}")
