"""
FAQ Chunker Module

Splits normalized FAQ entries into small overlapping chunks for embedding.
Uses LangChain's recursive splitter on natural boundaries.

Chunking Strategy:
- Recursive Character Splitting: paragraph, then line, then word, then raw characters
- Target size: 100 characters per chunk
- Overlap: 20 characters shared between neighbouring chunks
- Metadata: the source question travels with every chunk
- Chunks are not stripped, so boundary separators survive and the entry
  text can be rebuilt from its chunks
"""

import hashlib
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence

from langchain_text_splitters import RecursiveCharacterTextSplitter

from config.settings import ChunkingConfig
from faq_bot.faq_source import FAQEntry

# Configure logging
logger = logging.getLogger(__name__)


@dataclass
class Chunk:
    """
    Represents a single chunk of FAQ text with metadata.

    Attributes:
        text: The actual text content of the chunk
        metadata: Source info; always has "question"
        chunk_id: Unique identifier for this chunk
        chunk_index: Position of this chunk in the corpus (0-indexed)
    """

    text: str
    metadata: Dict[str, Any] = field(default_factory=dict)
    chunk_id: str = ""
    chunk_index: int = 0

    def __post_init__(self):
        """Generate chunk_id if not provided."""
        if not self.chunk_id:
            # Deterministic ID from question + index + content
            content_hash = hashlib.md5(
                f"{self.question}:{self.chunk_index}:{self.text}".encode()
            ).hexdigest()[:12]
            self.chunk_id = f"faq_{self.chunk_index}_{content_hash}"

    @property
    def question(self) -> str:
        """The FAQ question this chunk was cut from."""
        return self.metadata.get("question", "")

    def to_dict(self) -> Dict[str, Any]:
        """Convert chunk to dictionary."""
        return {
            "text": self.text,
            "chunk_id": self.chunk_id,
            "chunk_index": self.chunk_index,
            "metadata": self.metadata,
        }


class FAQChunker:
    """
    Splits FAQ entries into overlapping chunks.

    Each entry is chunked as "question\\nanswer". The splitter tries
    paragraph breaks first, then line breaks, then spaces, and only cuts
    inside a word when a single word is longer than chunk_size.

    Example:
        chunker = FAQChunker()
        chunks = chunker.split(entries)
        for chunk in chunks:
            print(f"{chunk.chunk_index}: {chunk.text} ({chunk.question})")
    """

    SEPARATORS = [
        "\n\n",  # Paragraph breaks (highest priority)
        "\n",    # Line breaks
        " ",     # Words
        "",      # Characters (last resort)
    ]

    def __init__(
        self,
        chunk_size: Optional[int] = None,
        chunk_overlap: Optional[int] = None,
        config: Optional[ChunkingConfig] = None,
    ):
        """
        Initialize the FAQChunker.

        Args:
            chunk_size: Target characters per chunk (default from config)
            chunk_overlap: Overlap between chunks (default from config)
            config: Optional ChunkingConfig instance
        """
        self.config = config or ChunkingConfig()

        self.chunk_size = chunk_size if chunk_size is not None else self.config.chunk_size
        self.chunk_overlap = chunk_overlap if chunk_overlap is not None else self.config.chunk_overlap

        if self.chunk_overlap >= self.chunk_size:
            raise ValueError(
                f"chunk_overlap ({self.chunk_overlap}) must be smaller than "
                f"chunk_size ({self.chunk_size})"
            )

        self._splitter = RecursiveCharacterTextSplitter(
            chunk_size=self.chunk_size,
            chunk_overlap=self.chunk_overlap,
            length_function=len,
            separators=self.SEPARATORS,
            keep_separator=True,
            strip_whitespace=False,
        )

        logger.debug(
            f"FAQChunker initialized: chunk_size={self.chunk_size}, "
            f"overlap={self.chunk_overlap}"
        )

    def split_entry(self, entry: FAQEntry, start_index: int = 0) -> List[Chunk]:
        """
        Split a single FAQ entry.

        Args:
            entry: The FAQ entry to split
            start_index: chunk_index of the first chunk produced

        Returns:
            List of Chunk objects in text order
        """
        chunks = []
        for text in self._splitter.split_text(entry.text):
            if not text.strip():
                continue
            chunks.append(Chunk(
                text=text,
                metadata={"question": entry.question},
                chunk_index=start_index + len(chunks),
            ))
        return chunks

    def split(self, entries: Sequence[FAQEntry]) -> List[Chunk]:
        """
        Split every FAQ entry into chunks.

        This is the main entry point for chunking. Pure and deterministic:
        the same entries always produce the same chunks.

        Args:
            entries: Normalized FAQ entries

        Returns:
            List of Chunk objects, numbered in corpus order
        """
        all_chunks: List[Chunk] = []

        for entry in entries:
            all_chunks.extend(self.split_entry(entry, start_index=len(all_chunks)))

        total = len(all_chunks)
        logger.info(
            f"Created {total} chunks from {len(entries)} FAQ entries "
            f"(avg {sum(len(c.text) for c in all_chunks) // max(total, 1)} chars/chunk)"
        )

        return all_chunks
