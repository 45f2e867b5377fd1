from datetime import datetime, timedelta

from core.exceptions import EmbeddingUnavailableError

BASE_DATE = datetime(2024, 1, 1)


class FakeEmbedder:
    """Deterministic embedder: keyword -> unit axis, everything else -> x axis"""

    AXES = {
        "react": [1.0, 0.0, 0.0],
        "python": [0.0, 1.0, 0.0],
        "design": [0.0, 0.0, 1.0],
    }

    def __init__(self):
        self.calls = []

    def generate_embedding(self, text, timeout=None):
        self.calls.append(text)
        for keyword, vector in self.AXES.items():
            if keyword in text.lower():
                return list(vector)
        return [1.0, 0.0, 0.0]


class FailingEmbedder:
    def __init__(self):
        self.calls = []

    def generate_embedding(self, text, timeout=None):
        self.calls.append(text)
        raise EmbeddingUnavailableError("Embedding quota exceeded")


def make_record(
    index,
    skills=("React",),
    experience=3,
    job_titles=("Frontend Developer",),
    education=("BSc Computer Science",),
    embedding=(1.0, 0.0, 0.0),
    content=None,
):
    return {
        "filename": f"cv_{index}.pdf",
        "originalName": f"Candidate {index}.pdf",
        "content": content or f"Candidate {index} CV. Skills: {', '.join(skills)}",
        "embeddings": list(embedding) if embedding is not None else [],
        "uploadDate": BASE_DATE + timedelta(days=index),
        "metadata": {
            "skills": list(skills),
            "experience": experience,
            "jobTitles": list(job_titles),
            "education": list(education),
            "contactDetails": {"email": f"candidate{index}@example.com"},
        },
    }
