from core.config import PUBLIC_BASE_URL, VAPI_WORKFLOW_ID


INTERVIEWER_SYSTEM_PROMPT = """You are a professional job interviewer conducting a real-time voice interview with a candidate. Your goal is to assess their qualifications, motivation, and fit for the role.

Interview Guidelines:
Follow the structured question flow:
{{questions}}

Engage naturally & react appropriately:
Listen actively to responses and acknowledge them before moving forward.
Ask brief follow-up questions if a response is vague or requires more detail.
Keep the conversation flowing smoothly while maintaining control.

Be professional, yet warm and welcoming:
Use official yet friendly language.
Keep responses concise and to the point (like in a real voice interview).
Avoid robotic phrasing. Sound natural and conversational.

Answer the candidate's questions professionally:
If asked about the role, company, or expectations, provide a clear and relevant answer.
If unsure, redirect the candidate to HR for more details.

Conclude the interview properly:
Thank the candidate for their time.
Inform them that the company will reach out soon with feedback.
End the conversation on a polite and positive note.

- Keep all your responses short and simple. Use official language, but be kind and welcoming.
- This is a voice conversation, so keep your responses short, like in a real conversation. Don't ramble for too long.
- If there is a pause for more than 5 seconds then end the call automatically."""


INTERVIEWER_ASSISTANT = {
    "name": "Interviewer",
    "firstMessage": (
        "Hello! Thank you for taking the time to speak with me today. "
        "I'm excited to learn more about you and your experience. Are you ready for the interview?"
    ),
    "transcriber": {
        "provider": "deepgram",
        "model": "nova-2",
        "language": "en",
    },
    "voice": {
        "provider": "11labs",
        "voiceId": "ryan",
        "stability": 0.4,
        "similarityBoost": 0.8,
        "speed": 0.9,
        "style": 0.5,
        "useSpeakerBoost": True,
    },
    "model": {
        "provider": "openai",
        "model": "gpt-4",
        "messages": [
            {
                "role": "system",
                "content": INTERVIEWER_SYSTEM_PROMPT,
            }
        ],
    },
}


def generator_workflow() -> dict:
    """
    Workflow that gathers role/type/level/techstack/amount by voice and
    posts them back to /api/vapi/generate. A hosted workflow id wins
    over the inline definition when configured.
    """
    if VAPI_WORKFLOW_ID:
        return {"workflowId": VAPI_WORKFLOW_ID}

    fields = ("role", "type", "level", "amount", "userid", "techstack")
    return {
        "workflow": {
            "name": "intervia_workflow",
            "nodes": [
                {"name": "start_node", "type": "start"},
                {
                    "name": "say",
                    "type": "say",
                    "exact": "Hello! I'll be asking you a few questions and generate a proper interview for you. \nAre you ready?",
                },
                {
                    "name": "gather",
                    "type": "gather",
                    "output": {
                        "type": "object",
                        "required": ["role", "type", "level", "techstack", "amount"],
                        "properties": {
                            "role": {"type": "string", "description": "What role are you interested in?"},
                            "type": {"type": "string", "description": "Do you want a technical, behavioral or a mixed interview?"},
                            "level": {"type": "string", "description": "The job experience level"},
                            "amount": {"type": "string", "description": "How many questions would you like?"},
                            "techstack": {"type": "string", "description": "A list of technologies to cover during the interview"},
                        },
                    },
                },
                {
                    "name": "generate",
                    "type": "apiRequest",
                    "method": "POST",
                    "url": f"{PUBLIC_BASE_URL}/api/vapi/generate",
                    "body": {
                        "type": "object",
                        "properties": {
                            name: {"type": "string", "value": f"{{{{ {name} }}}}"}
                            for name in fields
                        },
                    },
                    "mode": "blocking",
                },
                {
                    "name": "thanks",
                    "type": "say",
                    "prompt": "Say that the interview has been generated and thank the user for the call and say best of luck for the interview",
                },
                {"name": "hangup", "type": "hangup"},
            ],
            "edges": [
                {"from": "start_node", "to": "say"},
                {"from": "say", "to": "gather"},
                {"from": "gather", "to": "generate"},
                {"from": "generate", "to": "thanks"},
                {"from": "thanks", "to": "hangup"},
            ],
        }
    }
