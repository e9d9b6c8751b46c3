from __future__ import annotations

import json
from typing import Any, Dict


EMAIL_REPLY_SYSTEM_PROMPT = (
    "You are an email assistant drafting a reply on behalf of the mailbox owner. "
    "Return ONLY valid JSON of the form {\"body\": string}. "
    "No markdown or extra text. "
    "Keep the reply short, polite and in the language of the original email. "
    "Do not invent facts, commitments, dates or amounts that are not in the original email. "
    "Do not include a subject line or a signature placeholder."
)


def build_email_reply_prompt(email: Dict[str, Any]) -> dict:
    payload = {
        "from": email.get("fromName") or email.get("fromAddress"),
        "subject": email.get("subject"),
        "body": email.get("body"),
    }
    return {
        "system": EMAIL_REPLY_SYSTEM_PROMPT,
        "user": json.dumps(payload, ensure_ascii=False),
    }
