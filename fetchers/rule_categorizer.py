"""Rule-based category assignment for trending keywords."""

import logging
import re
from typing import Dict, List

from trendwise.config import DEFAULT_CATEGORY

logger = logging.getLogger(__name__)


# Subreddits whose name already says what the post is about.
SUBREDDIT_CATEGORIES: Dict[str, str] = {
    'technology': 'technology',
    'programming': 'technology',
    'gadgets': 'technology',
    'science': 'science',
    'space': 'science',
    'worldnews': 'politics',
    'politics': 'politics',
    'news': 'politics',
    'business': 'business',
    'economics': 'finance',
    'personalfinance': 'finance',
    'stocks': 'finance',
    'sports': 'sports',
    'nba': 'sports',
    'soccer': 'sports',
    'nfl': 'sports',
    'entertainment': 'entertainment',
    'movies': 'entertainment',
    'television': 'entertainment',
    'music': 'entertainment',
    'gaming': 'entertainment',
    'health': 'health',
    'fitness': 'health',
    'travel': 'travel',
    'food': 'food',
    'fashion': 'fashion',
    'environment': 'environment',
    'climate': 'environment',
    'education': 'education',
}


class RuleBasedCategorizer:
    """Fast keyword matching into the site's category set."""

    def __init__(self):
        self._setup_rules()

    def _setup_rules(self):
        """Initialize keyword mappings, checked in declaration order."""

        self.CATEGORY_KEYWORDS: Dict[str, Dict[str, List[str]]] = {
            'technology': {
                'ai': ['ai', 'chatgpt', 'openai', 'claude', 'gemini', 'machine learning', 'neural', 'llm',
                       'artificial intelligence', 'robot'],
                'crypto': ['bitcoin', 'btc', 'ethereum', 'crypto', 'blockchain', 'binance', 'coinbase', 'nft'],
                'companies': ['apple', 'google', 'microsoft', 'tesla', 'meta', 'amazon', 'nvidia', 'samsung'],
                'products': ['iphone', 'android', 'windows', 'ios', 'app', 'software', 'update', 'chip',
                             'quantum computing', 'cybersecurity'],
            },
            'health': {
                'medicine': ['vaccine', 'covid', 'virus', 'outbreak', 'hospital', 'cancer', 'disease', 'fda'],
                'wellness': ['fitness', 'diet', 'mental health', 'sleep', 'nutrition', 'workout'],
            },
            'finance': {
                'markets': ['stock', 'stocks', 'nasdaq', 'dow jones', 's&p', 'inflation', 'interest rate',
                            'fed', 'mortgage', 'earnings'],
            },
            'business': {
                'corporate': ['ceo', 'merger', 'acquisition', 'layoffs', 'startup', 'ipo', 'revenue', 'strike'],
            },
            'politics': {
                'government': ['senate', 'congress', 'parliament', 'government', 'minister', 'president'],
                'politicians': ['trump', 'biden', 'harris', 'republicans', 'democrats', 'senator'],
                'policies': ['medicaid', 'obamacare', 'immigration', 'tax', 'policy', 'tariff', 'tariffs'],
                'elections': ['election', 'vote', 'campaign', 'ballot', 'primary', 'candidate'],
            },
            'sports': {
                'general': ['championship', 'match', 'playoffs', 'super bowl', 'world cup', 'olympics',
                            'nba', 'nfl', 'mlb', 'nhl', 'ufc', 'formula 1', 'f1', 'grand prix'],
                'teams': ['lakers', 'warriors', 'yankees', 'patriots', 'chelsea', 'madrid', 'cowboys'],
                'athletes': ['lebron', 'messi', 'ronaldo', 'serena', 'hamilton', 'verstappen'],
            },
            'entertainment': {
                'music': ['concert', 'album', 'song', 'band', 'tour', 'grammy', 'grammys'],
                'tv_shows': ['episode', 'season', 'series', 'netflix', 'reality show'],
                'movies': ['movie', 'film', 'trailer', 'premiere', 'oscar', 'oscars', 'box office'],
                'gaming': ['game', 'gaming', 'esports', 'playstation', 'xbox', 'nintendo'],
            },
            'science': {
                'space': ['nasa', 'spacex', 'rocket', 'asteroid', 'eclipse', 'mars', 'moon'],
                'research': ['study', 'scientists', 'discovery', 'physics', 'fossil'],
            },
            'environment': {
                'climate': ['climate', 'hurricane', 'wildfire', 'earthquake', 'flood', 'heatwave', 'emissions'],
            },
            'travel': {
                'general': ['airline', 'flight', 'airport', 'tourism', 'vacation'],
            },
            'food': {
                'general': ['recipe', 'restaurant', 'chef', 'mcdonald', 'starbucks'],
            },
        }

        # Pre-compile one whole-word pattern per category so "ai" does not match "chair".
        self._patterns = {
            category: re.compile(
                r'\b(?:' + '|'.join(re.escape(k) for keywords in groups.values() for k in keywords) + r')\b'
            )
            for category, groups in self.CATEGORY_KEYWORDS.items()
        }

    def category_for(self, keyword: str) -> str:
        """Return the first category whose keywords appear in *keyword*."""
        topic_lower = keyword.lower().strip()

        if topic_lower.startswith('#'):
            topic_lower = topic_lower[1:]

        for category, pattern in self._patterns.items():
            if pattern.search(topic_lower):
                return category

        logger.debug(f"No category rule matched {keyword!r}")
        return DEFAULT_CATEGORY

    def category_for_subreddit(self, subreddit: str, title: str = "") -> str:
        """Map a subreddit to a category, falling back to the post title."""
        mapped = SUBREDDIT_CATEGORIES.get(subreddit.lower())
        if mapped:
            return mapped
        return self.category_for(title) if title else DEFAULT_CATEGORY
