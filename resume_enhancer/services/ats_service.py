"""
ATS compatibility scoring.

The model rates five criteria; the overall score is always recomputed here
from the weights so it stays consistent with the sub-scores.
"""
import logging
import math
from typing import Any, Dict, Optional

from resume_enhancer.core.exceptions import EnhancementError
from resume_enhancer.llm.provider import LLMProvider
from resume_enhancer.schemas.ats import ATSAnalysis
from resume_enhancer.services.ai_service import extract_json_object

logger = logging.getLogger(__name__)

SCORE_WEIGHTS = {
    "keywordMatch": 0.3,
    "formatScore": 0.2,
    "contentQuality": 0.25,
    "readabilityScore": 0.15,
    "structureScore": 0.1,
}

ATS_SYSTEM_PROMPT = """
You are an expert ATS (Applicant Tracking System) analyzer. Analyze the provided resume text and provide a comprehensive ATS compatibility score based on industry standards.

Evaluate the resume on these key criteria:

1. Keyword Match (0-100): How well the resume matches relevant industry keywords and skills
2. Format Score (0-100): ATS-friendly formatting (clear sections, standard headings, no graphics blocking text)
3. Content Quality (0-100): Quantified achievements, action verbs, relevant experience
4. Readability Score (0-100): Clear language, proper grammar, logical flow
5. Structure Score (0-100): Standard resume sections, clear hierarchy, contact info accessibility

Provide your analysis in this exact JSON structure:
{
  "keywordMatch": number,
  "formatScore": number,
  "contentQuality": number,
  "readabilityScore": number,
  "structureScore": number,
  "overallScore": number,
  "recommendations": ["Specific actionable recommendation 1", "Specific actionable recommendation 2"]
}

Guidelines:
- Overall score should be weighted average: (keywordMatch * 0.3) + (formatScore * 0.2) + (contentQuality * 0.25) + (readabilityScore * 0.15) + (structureScore * 0.1)
- Be objective and consistent in scoring
- Provide 3-5 specific, actionable recommendations
- Focus on real ATS compatibility issues, not visual design
- Only return valid JSON, no additional text
"""


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def clamp_score(value: Any) -> int:
    """Coerce a model-supplied score to an int in 0-100; junk becomes 0."""
    try:
        number = float(value or 0)
    except (TypeError, ValueError):
        return 0
    if math.isnan(number):
        return 0
    return _round_half_up(max(0.0, min(100.0, number)))


def weighted_overall(scores: Dict[str, int]) -> int:
    return _round_half_up(sum(scores[name] * weight for name, weight in SCORE_WEIGHTS.items()))


def parse_ats_json(response_text: str) -> ATSAnalysis:
    raw = extract_json_object(response_text)
    scores = {name: clamp_score(raw.get(name)) for name in SCORE_WEIGHTS}

    recommendations = raw.get("recommendations") or []
    if not isinstance(recommendations, list):
        recommendations = [recommendations]

    return ATSAnalysis(
        keyword_match=scores["keywordMatch"],
        format_score=scores["formatScore"],
        content_quality=scores["contentQuality"],
        readability_score=scores["readabilityScore"],
        structure_score=scores["structureScore"],
        overall_score=weighted_overall(scores),
        recommendations=[str(item) for item in recommendations if item],
    )


class ATSAnalyzer:
    def __init__(self, provider: LLMProvider, model: str = "gpt-4o-mini"):
        self.provider = provider
        self.model = model

    def analyze(self, resume_text: str, job_description: Optional[str] = None) -> ATSAnalysis:
        user_content = f"Analyze this resume for ATS compatibility:\n\n{resume_text}"
        if job_description:
            user_content += f"\n\nTarget job description (for keyword matching):\n{job_description}"

        messages = [
            {"role": "system", "content": ATS_SYSTEM_PROMPT},
            {"role": "user", "content": user_content},
        ]

        try:
            response = self.provider.chat(
                messages,
                model=self.model,
                temperature=0.3,
                max_tokens=1500,
                json_mode=True,
            )
        except Exception as e:
            logger.error(f"ATS analysis call failed: {e}", exc_info=True)
            raise EnhancementError(f"Failed to analyze ATS score: {e}") from e

        analysis = parse_ats_json(response.content)
        logger.info(f"ATS analysis completed: overall_score={analysis.overall_score}")
        return analysis
