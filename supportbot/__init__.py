"""Discord support bot answering from a Google Sheets knowledge base."""
