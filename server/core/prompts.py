"""Fixed reply texts and prompt templates per response language.

The no_documents and apology texts are part of the chat contract, chat
surfaces match on them. Change them only together with the clients.
"""

RESPONSE_LANGUAGES = ("id", "en")

MESSAGES: dict[str, dict[str, str]] = {
    "id": {
        "no_documents": "Maaf, saya tidak memiliki dokumen referensi untuk menjawab pertanyaan Anda.",
        "apology": "Maaf, terjadi kesalahan dalam memproses pertanyaan Anda.",
    },
    "en": {
        "no_documents": "Sorry, I don't have any reference documents to answer your question.",
        "apology": "Sorry, something went wrong while processing your question.",
    },
}

SYSTEM_PROMPTS: dict[str, str] = {
    "id": (
        "Anda adalah asisten yang membantu. Jawab pertanyaan hanya berdasarkan konteks yang diberikan. "
        "Jika konteks tidak memuat informasi yang cukup untuk menjawab, katakan dengan jelas bahwa "
        "informasi tersebut tidak tersedia dalam dokumen. Jangan mengarang jawaban."
    ),
    "en": (
        "You are a helpful assistant. Answer the question using only the provided context. "
        "If the context does not contain enough information to answer, say clearly that the "
        "information is not available in the documents. Do not make up an answer."
    ),
}

_LABELS: dict[str, tuple[str, str]] = {
    "id": ("Konteks", "Pertanyaan"),
    "en": ("Context", "Question"),
}


def build_user_prompt(language: str, context: str, query: str) -> str:
    """Render the user turn: labelled context block followed by the question."""
    context_label, question_label = _LABELS[language]
    return f"{context_label}:\n{context}\n\n{question_label}: {query}"
