RESUME_STRUCTURING_PROMPT = """
**Role:** You are an expert HR data analyst. Your task is to read the plain text of a candidate's resume and transform it into a structured JSON record for a recruitment platform.

**Objective:** Extract the candidate's details exactly as stated in the resume. Do not invent information. Your final output must be a single, clean JSON object containing only the fields listed below, without any additional explanations or conversational text.

---

**Instructions:**

1.  **`full_name`**: The candidate's full name.
2.  **`contact`**: An object with `phone`, `email`, `linkedin` and `address`. Use `null` for anything not present.
3.  **`skills`**: A deduplicated list of technical and professional skills, tools, languages and frameworks.
4.  **`education`**: A list of objects with `degree`, `university` and `year`.
5.  **`work_experience`**: A list of objects with `company`, `role` and `duration`.
    * The `duration` **must** be expressed in years and/or months, e.g. "2 years 3 months", "1 year", "6 months".
    * If the resume gives dates instead, convert the date range into years and months.
6.  **`projects`**: A list of objects with `title`, `description` and `technologies` (a comma-separated string).
7.  **`certifications`**: A list of certification names.
8.  **`notice_period`**: The candidate's notice period or availability if the resume states one (e.g. "30 days", "Immediate"), otherwise `null`.

Use `[]` (never `null`) for empty lists.

---

**Resume Text:**

\"\"\"
{resume_text}
\"\"\"

---

**Required Output Format:**

You **MUST** provide your response as a single, valid JSON object with the following structure. Do not include any text before or after the JSON object.

```json
{{
  "full_name": "<string>",
  "contact": {{"phone": "<string|null>", "email": "<string|null>", "linkedin": "<string|null>", "address": "<string|null>"}},
  "skills": ["<string>", ...],
  "education": [{{"degree": "<string>", "university": "<string>", "year": "<string>"}}],
  "work_experience": [{{"company": "<string>", "role": "<string>", "duration": "<string>"}}],
  "projects": [{{"title": "<string>", "description": "<string>", "technologies": "<string>"}}],
  "certifications": ["<string>", ...],
  "notice_period": "<string|null>"
}}
```
"""


RESUME_SCORING_PROMPT = """
**Role:** You are an AI HR assistant. Score this candidate's resume against the job requirements.

**Objective:** Score each factor strictly out of 100 points. The final score will be the average of the five factors. Be objective and evidence-based: consider exact matches and relevance, and do not speculate.

---

**Job Requirements:**

```json
{requirements_json}
```

**Candidate's Resume Data:**

```json
{resume_json}
```

---

**Scoring Rubric:**

1.  **Skills Match (0-100):**
    * Give points for exact or near matches with `required_skills` and `preferred_skills`.
    * Consider relevance and proficiency level.
    * Deduct points for missing critical required skills.

2.  **Experience Score (0-100):**
    * Compare `total_experience_years` with `experience_required.minimum` and `experience_required.maximum`.
    * Evaluate the relevance of past roles to the `role` being hired for.
    * Consider industry-specific experience against `experience_required.preferred_industry`.

3.  **Education Match (0-100):**
    * Score degree relevance against `qualifications`.
    * Consider the tier of the institution.
    * Treat certifications as a bonus.

4.  **Notice Period Score (0-100):**
    * 100 points if the candidate's notice period matches `notice_period.required`.
    * Deduct points proportionally as the candidate's notice period exceeds the requirement.
    * Give credit for immediate availability when `notice_period.preferred` calls for it.

5.  **Overall Profile Score (0-100):**
    * Project relevance.
    * Industry alignment.
    * Additional achievements not captured above.

---

**Required Output Format:**

You **MUST** provide your response as a single, valid JSON object with the following structure. Do not include any text before or after the JSON object.

```json
{{
  "breakdown": {{
    "skills_score": <number 0-100>,
    "experience_score": <number 0-100>,
    "education_score": <number 0-100>,
    "notice_period_score": <number 0-100>,
    "overall_profile_score": <number 0-100>
  }},
  "final_score": <number, average of all scores>,
  "detailed_reasoning": {{
    "skills_analysis": "<string>",
    "experience_analysis": "<string>",
    "education_analysis": "<string>",
    "notice_period_analysis": "<string>",
    "overall_analysis": "<string>"
  }}
}}
```
"""
