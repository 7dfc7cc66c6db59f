"""Serviços de domínio (regras de negócio e agregações)."""
