"""Mock responses for testing without API calls."""

# Gemini-style answer for a small Express handler, fenced the way the
# model sometimes returns it despite the instructions.
MOCK_RESPONSE = """```json
[
  {
    "file": "snippet",
    "line": 3,
    "severity": "Critical",
    "issue": "Code injection: request body is passed straight to eval()",
    "fix_suggestion": "Never eval user input. Parse data with JSON.parse and dispatch on an allow-list of operations."
  },
  {
    "file": "snippet",
    "line": 1,
    "severity": "High",
    "issue": "Hardcoded API key in source code",
    "fix_suggestion": "Load the key from the environment: process.env.API_KEY"
  }
]
```"""
