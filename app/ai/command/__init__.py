"""
Command pipeline - natural-language commands to inventory actions.

Modules:
- context: CommandContext snapshot built per request
- resolver: name -> id resolution over that snapshot
- interpreter: prompt -> provider -> parsed, resolved actions
"""
