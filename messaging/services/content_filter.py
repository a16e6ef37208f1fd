"""
Pattern-based screening of message text.

``analyze_content`` flags profanity, hate speech, harassment, violent threats
and spam. Severity decides what happens on send:

- ``high`` (hate speech or violence): refused.
- ``medium`` (harassment, or two or more categories): sent only when the
  sender confirms.
- ``low``: sent. Group messages keep their flag reasons for leader review.

This is a coarse pre-filter; reports remain the moderation path.
"""

import re
from dataclasses import dataclass, field
from typing import List

from rest_framework.exceptions import ValidationError

PROFANITY = 'profanity'
HATE_SPEECH = 'hate_speech'
HARASSMENT = 'harassment'
VIOLENCE = 'violence'
SPAM = 'spam'

SEVERITY_LOW = 'low'
SEVERITY_MEDIUM = 'medium'
SEVERITY_HIGH = 'high'

BLOCKED_MESSAGE = "This message contains content that violates community guidelines."
CONFIRM_MESSAGE = (
    "This message may contain inappropriate content. "
    "Send it again with confirm_flagged set to send anyway."
)


def _compile(*patterns, flags=re.IGNORECASE):
    return [re.compile(pattern, flags) for pattern in patterns]


# (reason, human-readable detail, patterns); l33tspeak and stretched letters tolerated
CATEGORIES = [
    (PROFANITY, "Contains profanity", _compile(
        r'\bf+[u*@]+c+k+',
        r'\bs+h+[i1!]+t+',
        r'\ba+s+s+h+o+l+e',
        r'\bb+[i1!]+t+c+h',
        r'\bd+[a@]+m+n',
        r'\bcr[a@]+p\b',
        r'\bw+t+f+\b',
        r'\bstfu\b',
    )),
    (HATE_SPEECH, "Potential hate speech detected", _compile(
        r'\b(kill|murder|exterminate)\s+(all|every|those)\b',
        r'\b(hate|despise)\s+(all|every)\s+(christians?|muslims?|jews?|blacks?|whites?|gays?|lesbians?)',
        r'\b(go\s+back\s+to|get\s+out\s+of)\s+(your|their)\s+(country|homeland)',
        r'\bn+[i1!]+g+',
        r'\bf+[a@]+g+[o0]+t',
        r'\br+e+t+[a@]+r+d',
    )),
    (HARASSMENT, "Potential harassment detected", _compile(
        r'\b(kill|hurt|harm)\s+(your|u|ur)self\b',
        r'\b(nobody|no\s*one)\s+(likes?|cares?\s+about|wants?)\s+(you|u)\b',
        r"\byou('re|\s+are)\s+(worthless|pathetic|disgusting|trash|garbage)\b",
        r'\b(go\s+)?(die|kys|kms)\b',
        r"\bi('ll|'m\s+going\s+to)\s+(find|hunt|track)\s+(you|u)\b",
    )),
    (VIOLENCE, "Violent content detected", _compile(
        r"\b(i('ll|'m\s+going\s+to)|gonna)\s+(kill|murder|shoot|stab|beat)\b",
        r'\bbring\s+(a\s+)?gun',
        r'\b(bomb|explosive|weapon)\s+(threat|attack)',
        r'\bshoot\s+(up|everyone|you)',
    )),
    (SPAM, "Potential spam detected", _compile(
        r'\b(click\s+here|visit\s+now|buy\s+now|free\s+money)\b',
        r'\b(bitcoin|crypto)\s+(investment|opportunity|giveaway)\b',
        r'\b(earn|make)\s+\$?\d+\s*(k|thousand|million|per\s+(day|hour|week))',
        r'\b(dm|message)\s+me\s+for\s+(details|more|info)\b',
    ) + [re.compile(r'(.)\1{10,}')]),
]

URL_PATTERN = re.compile(r'https?://\S+', re.IGNORECASE)
SPAM_URL_COUNT = 3


@dataclass(frozen=True)
class ContentFlag:
    flagged: bool = False
    reasons: List[str] = field(default_factory=list)
    severity: str = SEVERITY_LOW
    details: List[str] = field(default_factory=list)


def analyze_content(text) -> ContentFlag:
    reasons, details = [], []
    for reason, detail, patterns in CATEGORIES:
        hit = any(pattern.search(text) for pattern in patterns)
        if reason == SPAM and not hit:
            hit = len(URL_PATTERN.findall(text)) >= SPAM_URL_COUNT
        if hit:
            reasons.append(reason)
            details.append(detail)

    if HATE_SPEECH in reasons or VIOLENCE in reasons:
        severity = SEVERITY_HIGH
    elif HARASSMENT in reasons or len(reasons) >= 2:
        severity = SEVERITY_MEDIUM
    else:
        severity = SEVERITY_LOW

    return ContentFlag(flagged=bool(reasons), reasons=reasons, severity=severity, details=details)


def screen_message(text, confirmed=False) -> ContentFlag:
    """
    Raise ``ValidationError`` on ``content`` when ``text`` may not be sent.

    Returns the flag otherwise, so callers can store or log it.
    """
    flag = analyze_content(text)
    if flag.severity == SEVERITY_HIGH:
        raise ValidationError({'content': [BLOCKED_MESSAGE]}, code='content_blocked')
    if flag.severity == SEVERITY_MEDIUM and not confirmed:
        raise ValidationError({'content': [CONFIRM_MESSAGE]}, code='confirmation_required')
    return flag
