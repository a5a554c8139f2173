"""
Routers module - API endpoint handlers organized by feature.

Each router handles a specific domain of the API:
- ai: AI settings, natural-language commands, execution/undo,
  photo analysis and dictation structuring
"""
