"""
Speech Synthesis Components.

    - voices.py: gender/locale voice resolver for gTTS
    - engine.py: engine contract and factory
    - engines/: gTTS and Edge adapters
    - storage.py: artifact and upload stores
"""
