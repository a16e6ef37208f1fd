"""
Tests for message content screening.
"""

from django.test import SimpleTestCase
from rest_framework.exceptions import ValidationError

from messaging.services.content_filter import (
    BLOCKED_MESSAGE,
    CONFIRM_MESSAGE,
    HARASSMENT,
    PROFANITY,
    SEVERITY_HIGH,
    SEVERITY_LOW,
    SEVERITY_MEDIUM,
    SPAM,
    VIOLENCE,
    analyze_content,
    screen_message,
)


class AnalyzeContentTest(SimpleTestCase):

    def test_clean_text(self):
        flag = analyze_content('Praying for you and your family this week')

        self.assertFalse(flag.flagged)
        self.assertEqual(flag.reasons, [])
        self.assertEqual(flag.severity, SEVERITY_LOW)

    def test_single_profanity_is_low(self):
        flag = analyze_content('Traffic this morning was crap')

        self.assertTrue(flag.flagged)
        self.assertEqual(flag.reasons, [PROFANITY])
        self.assertEqual(flag.severity, SEVERITY_LOW)

    def test_harassment_is_medium(self):
        flag = analyze_content('Nobody likes you')

        self.assertEqual(flag.reasons, [HARASSMENT])
        self.assertEqual(flag.severity, SEVERITY_MEDIUM)

    def test_two_categories_are_medium(self):
        flag = analyze_content('wtf, click here')

        self.assertEqual(flag.reasons, [PROFANITY, SPAM])
        self.assertEqual(flag.severity, SEVERITY_MEDIUM)

    def test_threat_is_high(self):
        flag = analyze_content("I'll kill you")

        self.assertIn(VIOLENCE, flag.reasons)
        self.assertEqual(flag.severity, SEVERITY_HIGH)

    def test_many_links_count_as_spam(self):
        flag = analyze_content('https://a.example https://b.example https://c.example')

        self.assertEqual(flag.reasons, [SPAM])

    def test_two_links_are_fine(self):
        self.assertFalse(analyze_content('https://a.example and https://b.example').flagged)

    def test_stretched_characters_count_as_spam(self):
        self.assertEqual(analyze_content('amen' + '!' * 15).reasons, [SPAM])


class ScreenMessageTest(SimpleTestCase):

    def test_high_severity_refused_even_when_confirmed(self):
        with self.assertRaises(ValidationError) as ctx:
            screen_message("I'm going to shoot you", confirmed=True)

        self.assertEqual(str(ctx.exception.detail['content'][0]), BLOCKED_MESSAGE)

    def test_medium_severity_needs_confirmation(self):
        with self.assertRaises(ValidationError) as ctx:
            screen_message("You're worthless")

        self.assertEqual(str(ctx.exception.detail['content'][0]), CONFIRM_MESSAGE)

    def test_medium_severity_confirmed(self):
        flag = screen_message("You're worthless", confirmed=True)

        self.assertEqual(flag.severity, SEVERITY_MEDIUM)

    def test_low_severity_passes(self):
        flag = screen_message('What the crap')

        self.assertEqual(flag.reasons, [PROFANITY])
