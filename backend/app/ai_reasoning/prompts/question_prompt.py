def build_question_prompt(role: str, level: str, techstack: str, interview_type: str, amount) -> str:
    return f"""
Prepare questions for a job interview.
The job role is {role}.
The job experience level is {level}.
The tech stack used in the job is: {techstack}.
The focus between behavioural and technical questions should lean towards: {interview_type}.
The amount of questions required is: {amount}.
Please return only the questions, without any additional text.
The questions are going to be read by a voice assistant so do not use "/" or "*" or any other special characters which might break the voice assistant.

Return STRICT JSON only in this format:
{{
  "questions": ["Question 1", "Question 2", "Question 3"]
}}
"""
