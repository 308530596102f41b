"""Care onboarding service: post-registration task orchestrator."""
