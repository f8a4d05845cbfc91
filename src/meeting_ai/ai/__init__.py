"""AI task pipeline -- prompt building, Gemini generation, and normalization.

TaskDispatcher is the entry point: it validates the task type and runs
PromptBuilder -> GenerationClient -> ResponseNormalizer for one request.
"""
