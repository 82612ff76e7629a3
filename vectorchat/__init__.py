"""
vectorchat: retrieval-augmented chat over a Pinecone index.
"""
