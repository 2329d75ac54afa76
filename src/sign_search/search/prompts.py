# =============================================================================
# SYSTEM INSTRUCTIONS
# =============================================================================

SYSTEM_SEARCH_RERANK = (
    "You are a search relevance expert for a sign language video library. "
    "Always return valid JSON."
)

SYSTEM_QUERY_PARSING = (
    "You extract search keywords from questions about sign language. "
    "Reply with the keyword only."
)

SYSTEM_TAG_GENERATION = (
    "You are a sign language video cataloguer. Always return valid JSON."
)


# =============================================================================
# SEARCH PROMPTS
# =============================================================================

QUERY_PARSING = """Given the following natural language search query about sign language, extract the most relevant keyword or phrase that would help find matching videos. Return only the keyword/phrase, with no additional text.

Query: {query}

Examples:
- "How do you say sorry in Thai Sign Language?" -> "sorry"
- "Show me the sign for thank you in ASL" -> "thank you"
- "What's the sign for hello in British Sign Language?" -> "hello"

Return only the keyword/phrase, nothing else."""


RERANK = """Given this search query: "{query}"

Rank the following video entries by relevance (1-10 scale, where 10 is most relevant):
Return only a JSON array with video_url and relevance_score for each entry.

Videos:
{candidates}

Response format: [{{"video_url": "url", "relevance_score": number}}, ...]
Only include videos with relevance_score >= {min_score}.
Return ONLY the JSON array."""


RERANK_CANDIDATE = """{index}. URL: {video_url}
Title: {title}
Description: {description}
Tags: {tags}"""


# =============================================================================
# TAGGING PROMPTS
# =============================================================================

TAG_GENERATION = """Given the following sign language video title and description, generate relevant tags that would help users find this video. Return only a JSON array of strings, with no additional text.

Title: {title}
Description: {description}

Generate tags that are:
1. Relevant to sign language and deaf culture
2. Specific to the content
3. Include any emotions or actions shown
4. Include the language and region if mentioned
5. Include any specific signs or phrases taught

Return only a JSON array of strings, like: ["tag1", "tag2", "tag3"]"""
