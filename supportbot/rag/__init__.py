"""
RAG (Retrieval Augmented Generation) module for the support bot.

Retrieves the most similar historical Q&A pairs from the Google Sheets
knowledge base and turns them into a grounded completion prompt.

Components:
    - knowledge_base: Loads and validates the Q&A sheet, reporting warnings
    - embedding_cache: Reuses vectors cached in the sheet's Embedding column
    - embedder: Token-bounded batching against the OpenAI embeddings API
    - similarity: Cosine similarity between two vectors
    - retriever: Ranks knowledge rows against the user query
    - prompt_builder: Builds the ordered chat completion messages
"""
