from django.test import SimpleTestCase

from analyzer.exceptions import ParseError
from analyzer.services.assessment import parse_assessment

FENCED_REPLY = """Here is the analysis of your build:

```json
{
  "cpu_bottleneck": "no",
  "gpu_bottleneck": "Yes",
  "ram_bottleneck": "no",
  "storage_bottleneck": "no",
  "resolution_bottleneck": "yes",
  "overall_bottleneck": "yes",
  "recommendations": [
    "Upgrade to an RTX 4070 for 1440p gaming",
    "  "
  ]
}
```
"""


class AssessmentParserTests(SimpleTestCase):
    def test_fenced_reply(self):
        assessment = parse_assessment(FENCED_REPLY)
        self.assertFalse(assessment.cpu)
        self.assertTrue(assessment.gpu)
        self.assertEqual(assessment.flagged(), ["gpu", "resolution", "overall"])
        self.assertEqual(
            assessment.recommendations, ["Upgrade to an RTX 4070 for 1440p gaming"]
        )

    def test_skipped_fields_are_none(self):
        assessment = parse_assessment(
            '{"cpu_bottleneck": "no", "gpu_bottleneck": "no", "recommendations": []}'
        )
        self.assertIsNone(assessment.storage)
        self.assertEqual(assessment.flagged(), [])
        self.assertEqual(assessment.to_dict()["storage_bottleneck"], None)
        self.assertEqual(assessment.to_dict()["cpu_bottleneck"], "no")

    def test_skips_braces_that_are_not_json(self):
        assessment = parse_assessment(
            'Specs {cpu, gpu} look fine. {"overall_bottleneck": "no"}'
        )
        self.assertFalse(assessment.overall)

    def test_invalid_replies(self):
        bad = [
            "",
            "No JSON here at all",
            '{"cpu_bottleneck": "maybe"}',
            '{"cpu_bottleneck": true}',
            '{"gpu_bottleneck": "no", "recommendations": "buy more RAM"}',
            '{"unrelated": 1}',
            '["cpu_bottleneck"]',
        ]
        for text in bad:
            with self.subTest(text=text):
                with self.assertRaises(ParseError):
                    parse_assessment(text)

    def test_non_string_reply(self):
        with self.assertRaises(ParseError):
            parse_assessment(None)
