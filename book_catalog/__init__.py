"""Book Catalog - MongoDB book management console

This package contains:
- Data models and DTOs (book.py)
- Validation rules and parsers (validators.py)
- Console input mapping (mapper.py)
- MongoDB connection handling (database.py)
- Persistence boundary (repository.py)
- Business rules (book_service.py)
- Interactive menu (application.py)
- CLI entry point (main.py)
"""
