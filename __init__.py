"""
YouTube Thumbnail Wizard
========================
Step-by-step creation of AI-generated YouTube thumbnails from a face photo.

Modules:
    - wizard_state: Wizard session model and its single-writer store
    - step_sequencer: Step order and per-step validation gates
    - style_resolver: Style catalog from the styles bucket
    - prompt_generation: Prompt composition from the wizard fields
    - generation_proxy: OpenAI call and response normalization
    - storage: Local / Supabase object storage

Usage:
    python main.py                  # Start the web server
    python main.py --generate ...   # One-shot generation from the command line
"""

__version__ = "1.0.0"
