"""
Test suite for tokenops.

Focus areas:
- Reference parsing and resolution precedence
- Credential store key handling and default operators
- Alias uniqueness
- Orchestrator signer selection and result normalization
- Token state idempotence and statistics
- Local ledger hash chain and receipts
- Command handlers and CLI exit codes
"""
