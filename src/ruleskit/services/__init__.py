"""Service layer: generation and catalog operations returning ServiceResult."""
