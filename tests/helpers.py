"""Builders for a tiny local BERT model used across tests."""

from typing import Any

import torch
from tokenizers import Tokenizer
from tokenizers.models import WordLevel
from tokenizers.pre_tokenizers import Whitespace
from tokenizers.processors import TemplateProcessing
from transformers import BertConfig, BertModel

VOCAB = ["[PAD]", "[UNK]", "[CLS]", "[SEP]", "the", "quick", "brown", "fox", "jumps", "over", "lazy", "dog"]

TINY_CONFIG: dict[str, Any] = {
    "architectures": ["BertModel"],
    "model_type": "bert",
    "vocab_size": len(VOCAB),
    "hidden_size": 8,
    "num_hidden_layers": 1,
    "num_attention_heads": 2,
    "intermediate_size": 16,
    "max_position_embeddings": 8,
    "type_vocab_size": 2,
    "hidden_act": "gelu",
    "hidden_dropout_prob": 0.1,
    "attention_probs_dropout_prob": 0.1,
}


def build_tokenizer() -> Tokenizer:
    """Build a whitespace WordLevel tokenizer that adds [CLS] ... [SEP]."""
    tokenizer = Tokenizer(WordLevel(vocab={word: i for i, word in enumerate(VOCAB)}, unk_token="[UNK]"))
    tokenizer.pre_tokenizer = Whitespace()
    tokenizer.post_processor = TemplateProcessing(
        single="[CLS] $A [SEP]",
        special_tokens=[("[CLS]", VOCAB.index("[CLS]")), ("[SEP]", VOCAB.index("[SEP]"))],
    )
    return tokenizer


def build_reference_model(seed: int = 0) -> BertModel:
    """Build the tiny BERT with the activation the loader uses."""
    torch.manual_seed(seed)
    config = BertConfig.from_dict({**TINY_CONFIG, "hidden_act": "gelu_new"})
    model = BertModel(config, add_pooling_layer=False)
    model.eval()
    return model
