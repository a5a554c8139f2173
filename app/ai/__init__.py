"""
AI Module - natural-language features of Binkeeper

Everything here runs on the user's own AI account: the provider, key and
model come from their settings on every request, and nothing is shared
between users.

Architecture Overview:
=====================

  "Add screwdriver to the tools bin"
                │
                ▼
┌───────────────────────────────┐
│        Prompt Builder         │  bins/areas snapshot as JSON,
│   (prompts/command_prompts)   │  color + icon vocabularies
└───────────────┬───────────────┘
                ▼
┌───────────────────────────────┐
│       Provider Gateway        │  OpenAI / Anthropic /
│         (providers/)          │  OpenAI-compatible
└───────────────┬───────────────┘
                ▼
┌───────────────────────────────┐
│    Interpreter + Resolver     │  parse, drop malformed,
│          (command/)           │  names -> ids
└───────────────┬───────────────┘
                ▼
      review -> execute (app/services)

Module Structure:
================
- providers/: AI provider clients and the error taxonomy
- prompts/: Prompt templates for commands, photo analysis, dictation
- schemas/: Action union and suggestion models
- command/: Context snapshot, interpreter, resolver
- analysis.py / structuring.py: the photo and dictation flows
- monitoring/: Structured request/response logging
"""

# Version of the AI module
__version__ = "0.1.0"

# Re-export main components for easy imports
from app.ai.command.interpreter import CommandInterpreter, command_interpreter
from app.ai.schemas.actions import Action, ActionType, InterpretationResult

__all__ = [
    "CommandInterpreter",
    "command_interpreter",
    "Action",
    "ActionType",
    "InterpretationResult",
]
