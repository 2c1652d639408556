"""Prompt templates for question generation, coding problems, answers and feedback."""

from __future__ import annotations

from interview_prep.companies import (
    CompanyClassifier,
    KeywordClassifier,
    coding_focus_for,
    guidelines_for,
)
from interview_prep.models import Conversation, Message

QUESTION_COUNT = 85
CODING_COUNT = 30

QUESTION_SYSTEM_PROMPT = (
    "You are an expert interviewer specializing in tailoring questions to specific job "
    "descriptions, key skills, and resumes. Generate unique, diverse questions based on "
    "provided details. Return only valid JSON arrays of interview questions. "
    "No explanations, no markdown formatting."
)

QUESTION_PROMPT_TEMPLATE = """\
Generate {count} unique interview questions tailored specifically for the role of {job_title} at {company} ({company_type}). Base the questions directly on the provided job description, key requirements (skills/technologies), and candidate's resume. Extract key skills, technologies, experiences, and responsibilities from the job description, requirements, and resume. Ensure questions cover these areas proportionally and are diverse. Avoid generic questions; make them relevant to the mentioned skills (e.g., if React and Node.js are in requirements/resume, include specific questions on React hooks, Node.js async patterns). Align with company type patterns, focusing on OOP concepts, DSA levels, and JD alignment as per guidelines. Do not repeat questions across different roles or generate the same set.

Job Details:
- Title: {job_title}
- Company: {company} ({company_type})
- Description: {description}
- Requirements/Key Skills: {requirements}
- Resume/Experience: {resume}

Return ONLY a JSON array with {count} questions:
- 60 technical questions (20 easy, 20 medium, 20 hard) – Categorize based on key skills (e.g., "React", "SQL", "DSA: Graphs")
- 25 behavioral questions (8 easy, 9 medium, 8 hard) – Tie to resume experiences and job responsibilities

Format:
[
  {{"question": "Question text", "type": "technical", "difficulty": "Easy", "category": "React"}},
  {{"question": "Question text", "type": "behavioral", "difficulty": "Medium", "category": "Leadership"}}
]

Company focus for {company_type}:
{guidelines}

Generate realistic, commonly-asked questions that directly align with the JD skills, resume experiences, OOP (core/advanced as per type), DSA (level as per type), and best practices. Prioritize questions that match patterns for the company type (e.g., system design for product-based, fundamentals for service-based, practical for startups). Ensure diversity and relevance to avoid repetition. Return only the JSON array, no other text.\
"""

CODING_SYSTEM_PROMPT = (
    "You are an expert coding interviewer who generates realistic, frequently-asked "
    "coding questions. Always respond with valid JSON only."
)

CODING_PROMPT_TEMPLATE = """\
You are an expert coding interviewer who knows the most commonly asked coding questions. Generate {count} coding/DSA questions that are frequently asked in interviews for {job_title} at {company_type} companies like {company}. Questions must be based on typical patterns for the company type, with focus on DSA levels, OOP integration where relevant, and best match to common problems.

Company Type Focus for {company_type}:
{focus}

For each question, provide:
1. title: The question title
2. difficulty: Easy/Medium/Hard (distribute evenly)
3. category: The main topic (Array, String, Tree, Graph, DP, etc.)
4. description: Brief description of the problem
5. platform: "leetcode" or "geeksforgeeks"
6. url: The actual URL to the problem (use real LeetCode/GFG URLs)
7. tags: Array of relevant tags

Return as JSON array with this format:
[
  {{
    "title": "Two Sum",
    "difficulty": "Easy",
    "category": "Array",
    "description": "Find two numbers that add up to target",
    "platform": "leetcode",
    "url": "https://leetcode.com/problems/two-sum/",
    "tags": ["array", "hash-table"]
  }}
]

Generate popular, frequently-asked questions that have high probability of appearing in actual interviews, matching the company type patterns.\
"""

ANSWER_SYSTEM_PROMPT = (
    "You are an expert interview coach generating concise, natural, professional answers. "
    "Include short code snippets for technical answers that are properly formatted and "
    "usable directly."
)

ANSWER_PROMPT_TEMPLATE = """\
You are an expert interview coach. Generate a natural, concise, and memorable answer for this {question_type} interview question. Make it flow like a human speaking, with short paragraphs. You can include 1-2 simple points in behavioral answers if it makes it easier to remember. For technical answers, include a properly formatted, short code snippet that can be used directly. Keep everything easy to recall and professional.

Question: {question}
Job Title: {job_title}
Candidate's Resume: {resume}

{framing}

Formatting rules:
- Natural, conversational paragraphs
- Short and concise
- Logical flow
- Confident, professional tone
- End with an impact or takeaway\
"""

BEHAVIORAL_FRAMING = """\
For behavioral questions, tell a brief story about a challenge or situation. Focus on what YOU did, the result, and any lesson learned. Keep it natural and conversational. Include simple points if needed but avoid long lists. Use metrics or impact statements if relevant. Example: "I noticed our deployment process was slow, so I automated tests and reduced errors, which cut release time by 20%. It taught me the value of proactive problem-solving.\"\
"""

TECHNICAL_FRAMING = """\
For technical questions, give a short definition or concept explanation. Provide a properly formatted code snippet that can be copy-pasted, like:

class Person:
    def __init__(self, name):
        self.name = name

    def greet(self):
        print(f"Hello, my name is {self.name}")

Person("Alice").greet()  # Output: Hello, my name is Alice

Then mention key considerations, best practices, or trade-offs in a short paragraph. Keep it concise, clear, and easy to recall.\
"""

ANALYSIS_SYSTEM_PROMPT = (
    "You are an expert interviewer who provides detailed, constructive feedback on "
    "interview answers. Always respond with valid JSON only. Ensure all strings are "
    "properly terminated and the JSON is valid."
)

ANALYSIS_PROMPT_TEMPLATE = """\
You are an expert interviewer evaluating a candidate's answer. Analyze this interview response:

Question: {question}
Job Title: {job_title}
Candidate's Answer: {user_answer}

Provide a detailed analysis with:
1. Score (1-10 scale)
2. 2-4 specific strengths of the answer
3. 2-4 areas for improvement
4. An improved version of the answer that addresses the weaknesses

Return the response as JSON with this exact format:
{{
  "score": 7,
  "strengths": ["Strength 1", "Strength 2"],
  "improvements": ["Improvement 1", "Improvement 2"],
  "improvedAnswer": "The improved answer text here..."
}}

Be constructive and specific in your feedback. Focus on:
- Clarity and structure
- Technical accuracy (if applicable)
- Use of examples
- Confidence and professionalism
- Completeness of the response

IMPORTANT: Ensure your JSON response is properly formatted with all strings properly terminated.\
"""

_NOT_PROVIDED = "Not provided"


def _conversation(system: str, user: str) -> Conversation:
    return [Message("system", system), Message("user", user)]


def build_question_generation_prompt(
    job_title: str,
    company: str,
    description: str,
    requirements: str,
    resume: str,
    classifier: CompanyClassifier | None = None,
    company_type: str | None = None,
) -> Conversation:
    """An explicit *company_type* skips classification."""
    if not company_type:
        company_type = (classifier or KeywordClassifier()).classify(company, description or "")
    prompt = QUESTION_PROMPT_TEMPLATE.format(
        count=QUESTION_COUNT,
        job_title=job_title,
        company=company,
        company_type=company_type,
        description=description or _NOT_PROVIDED,
        requirements=requirements or _NOT_PROVIDED,
        resume=resume or _NOT_PROVIDED,
        guidelines=guidelines_for(company_type),
    )
    return _conversation(QUESTION_SYSTEM_PROMPT, prompt)


def build_coding_prompt(job_title: str, company: str, company_type: str) -> Conversation:
    prompt = CODING_PROMPT_TEMPLATE.format(
        count=CODING_COUNT,
        job_title=job_title,
        company=company,
        company_type=company_type,
        focus=coding_focus_for(company_type),
    )
    return _conversation(CODING_SYSTEM_PROMPT, prompt)


def build_answer_prompt(
    question: str, job_title: str, resume: str, question_type: str
) -> Conversation:
    framing = BEHAVIORAL_FRAMING if question_type == "behavioral" else TECHNICAL_FRAMING
    prompt = ANSWER_PROMPT_TEMPLATE.format(
        question_type=question_type,
        question=question,
        job_title=job_title,
        resume=resume or _NOT_PROVIDED,
        framing=framing,
    )
    return _conversation(ANSWER_SYSTEM_PROMPT, prompt)


def build_analysis_prompt(question: str, user_answer: str, job_title: str) -> Conversation:
    prompt = ANALYSIS_PROMPT_TEMPLATE.format(
        question=question,
        job_title=job_title,
        user_answer=user_answer,
    )
    return _conversation(ANALYSIS_SYSTEM_PROMPT, prompt)
