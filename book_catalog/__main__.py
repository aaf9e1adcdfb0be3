from book_catalog.main import run

run()
