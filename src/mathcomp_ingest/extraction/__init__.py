# ABOUTME: Page loading and wiki page parsing
# ABOUTME: Pipeline Stage 1: fetch pages, split into sections, normalize content, resolve answers

"""
Extraction Layer: Get structured fragments out of wiki pages

This layer handles:
- Browser-driven page loading with a content-ready wait
- Heading-based section segmentation
- Text and portable markup normalization
- Answer resolution from answer keys and solution prose

Data Flow: Wiki pages → Sections → Normalized content → Record assembly
"""
