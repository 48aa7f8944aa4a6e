"""
AI resume restyling.

Asks the LLM for a structured, redesigned version of a resume and validates
what comes back before it is stored as preview JSON.
"""
import json
import logging
import re
from typing import Any, Dict, List, Optional

from resume_enhancer.core.exceptions import EnhancementError
from resume_enhancer.llm.provider import LLMProvider

logger = logging.getLogger(__name__)

STYLE_INSTRUCTIONS = {
    "professional": "Use a professional theme with a clean layout and standard fonts",
    "concise": "Use a minimalist design with focused content and compact spacing",
    "creative": "Use a modern, eye-catching design with distinctive visual elements",
    "grammarFix": "Enhance language quality and correct grammatical issues",
    "styleOnly": "Focus only on design, preserve the original text content exactly",
}

RESUME_JSON_SHAPE = """{
    "name": "Full Name",
    "title": "Professional Title",
    "location": "City, Country",
    "contacts": [
        { "type": "email", "value": "email@example.com" },
        { "type": "website", "value": "https://yourwebsite.com" },
        { "type": "linkedin", "value": "linkedin.com/in/username" },
        { "type": "github", "value": "github.com/username" }
    ],
    "education": [
        {
            "degree": "Degree Name",
            "institution": "Institution Name",
            "location": "City, Country",
            "dates": "Start Date - End Date",
            "details": ["Detail 1", "Detail 2"]
        }
    ],
    "experience": [
        {
            "position": "Job Title",
            "company": "Company Name",
            "location": "City, Country",
            "dates": "Start Date - End Date",
            "highlights": ["Achievement 1", "Achievement 2"],
            "tags": ["React", "Node.js"]
        }
    ],
    "skills": ["JavaScript", "TypeScript", "Python"],
    "design": {
        "layout": { "columns": 2, "columnGap": 20, "padding": 40 },
        "typography": { "fontFamily": "Noto Sans", "fontSize": 10, "lineHeight": 1.5, "paragraphSpacing": 20 },
        "colors": {
            "primary": "#333333",
            "secondary": "#666666",
            "accent": "#007bff",
            "text": "#333333",
            "background": "#ffffff"
        }
    }
}"""

LIST_FIELDS = ("contacts", "education", "experience", "skills")


def build_system_prompt(styles: Optional[List[str]] = None, custom_instructions: Optional[str] = None) -> str:
    style_lines = "\n".join(
        f"- {STYLE_INSTRUCTIONS[style]}" for style in (styles or []) if style in STYLE_INSTRUCTIONS
    )
    prompt = (
        "You are an expert resume enhancer and designer. Analyze the provided resume and "
        "generate a JSON object with the following structure:\n\n"
        f"{RESUME_JSON_SHAPE}\n\n"
        "Guidelines:\n"
        "- Use the above structure exactly, even if some fields are empty.\n"
        "- For contacts, use an array of objects with 'type' and 'value'.\n"
        "- Do not fabricate information; only extract what is present in the resume.\n"
        "- For missing information, use empty strings for text fields or empty arrays for array fields.\n"
        "- Output ONLY the raw JSON object, without comments, markdown or explanations.\n"
        "- Always include the \"design\" object with \"layout.columns\" set to 2.\n"
    )
    if style_lines:
        prompt += style_lines + "\n"
    if custom_instructions:
        prompt += f"\nAdditional instructions: {custom_instructions}\n"
    return prompt


def extract_json_object(response_text: str) -> Dict[str, Any]:
    """
    Pull the outermost JSON object out of a model response.

    Raises:
        EnhancementError: On an empty response or when no object parses
    """
    if not response_text:
        raise EnhancementError("Empty response from AI model")

    match = re.search(r"\{[\s\S]*\}", response_text)
    if not match:
        raise EnhancementError("No valid JSON object found in the response")

    try:
        parsed = json.loads(match.group(0))
    except ValueError as e:
        raise EnhancementError(f"Failed to parse AI response as JSON: {e}") from e

    if not isinstance(parsed, dict):
        raise EnhancementError("AI response is not a JSON object")
    return parsed


def parse_resume_json(response_text: str) -> Dict[str, Any]:
    """
    Pull the resume object out of a model response and fill in defaults.

    Raises:
        EnhancementError: When no usable object is found
    """
    resume = extract_json_object(response_text)

    if not resume.get("name") and not resume.get("title"):
        raise EnhancementError("Invalid JSON structure: missing both name and title fields")

    resume["name"] = resume.get("name") or "Name Not Found"
    resume["title"] = resume.get("title") or "Title Not Found"
    resume["location"] = resume.get("location") or ""
    for field in LIST_FIELDS:
        resume[field] = resume.get(field) or []
    return resume


class ResumeEnhancer:
    def __init__(self, provider: LLMProvider, model: str = "gpt-4o-mini"):
        self.provider = provider
        self.model = model

    def enhance(
        self,
        resume_text: str,
        styles: Optional[List[str]] = None,
        custom_instructions: Optional[str] = None,
    ) -> Dict[str, Any]:
        """Return the restyled resume as a dict ready to store as preview JSON."""
        messages = [
            {"role": "system", "content": build_system_prompt(styles, custom_instructions)},
            {"role": "user", "content": f"Here is the resume to enhance and design:\n\n{resume_text}"},
        ]

        try:
            response = self.provider.chat(
                messages,
                model=self.model,
                temperature=0.7,
                max_tokens=4000,
                json_mode=True,
            )
        except EnhancementError:
            raise
        except Exception as e:
            logger.error(f"AI enhancement call failed: {e}", exc_info=True)
            raise EnhancementError(f"AI enhancement failed: {e}") from e

        resume = parse_resume_json(response.content)
        logger.info(f"Enhanced resume: styles={styles or []}, sections={len(resume['experience'])} experience entries")
        return resume
