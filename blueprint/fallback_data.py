"""
Pre-generated blueprints served when live fetching or generation fails.
Built once at import and never mutated.
"""
import random
from types import MappingProxyType
from typing import Any, Dict, Mapping, Optional, Tuple

from pydantic import BaseModel, ConfigDict

from blueprint.models.analysis import StructuredAnalysis
from blueprint.models.items import ContentItem, SourceProfile

DEMO_ACCOUNTS: Dict[str, Dict[str, Any]] = {
    "tibo_maker": {
        "profile": {
            "handle": "tibo_maker",
            "displayName": "Tibo",
            "avatarUrl": "https://pbs.twimg.com/profile_images/1372524342898081793/LKS5xWNA_400x400.jpg",
            "bio": "Building in public 🚀 Founder of Tweethunter & Taplio. Sharing the journey.",
        },
        "items": [
            "I quit my $200K job to build side projects. 2 years later, I make more than I ever did. Here's what I learned:",
            "The best marketing strategy? Build something people actually want. Revolutionary, I know.",
            "Shipped 3 features in 48 hours this week. Not because I'm fast. Because I cut scope ruthlessly.",
            "Your audience doesn't want tips. They want proof. Show your numbers. Show your failures. Show your wins.",
            "Stop building features nobody asked for. Start talking to users. It's that simple.",
            "Hot take: Most 'failed' startups didn't fail. They just gave up too early.",
            "The algorithm doesn't hate you. Your content is just boring. Fix that first.",
            "Building in public isn't about transparency. It's about accountability to yourself.",
            "Raised $0. No co-founder. Just shipped for 2 years straight. You don't need permission to build.",
            "The best time to start was yesterday. The second best time is after you finish reading this post.",
        ],
        "analysis": {
            "styleSnapshot": {
                "tone": "Casual, punchy, founder-mode energy. Direct and no-nonsense with occasional humor.",
                "typicalLength": "Short to medium (50-200 characters). Single posts, rarely threads.",
                "emojiUsage": "Minimal and strategic. Occasional 🚀 for launches, rarely overuses.",
                "formattingHabits": "Clean single posts. Uses line breaks for emphasis. No hashtags. Rare images.",
            },
            "themes": [
                "Building in public",
                "Indie hacking & bootstrapping",
                "Content creation & audience growth",
                "Shipping fast & cutting scope",
                "Founder mindset & resilience",
            ],
            "beliefs": {
                "pushes": [
                    "Ship fast, iterate faster",
                    "Transparency builds trust",
                    "Solo founders can win big",
                    "Talk to users, not investors",
                    "Revenue over vanity metrics",
                ],
                "avoids": [
                    "VC hype and fundraising culture",
                    "Over-engineering and perfectionism",
                    "Feature bloat without validation",
                    "Excuses and victim mentality",
                ],
            },
            "formulas": [
                "Hook with bold claim → Evidence/Story → Insight",
                "Contrarian take → 'Here's why' breakdown",
                "Before/After transformation story",
                "List of lessons learned (numbered)",
                "Simple truth stated bluntly",
            ],
            "rationale": {
                "hooks": "Opens with bold claims, surprising numbers, or relatable frustrations. First line demands attention.",
                "psychology": "Combines FOMO (success stories) with hope (you can do it too) and relatability (I struggled too).",
                "audienceFit": "Speaks directly to indie hackers, solopreneurs, and builders who want freedom over funding.",
            },
            "exampleContent": [
                "Everyone's chasing viral posts. I'm chasing repeat customers. One pays the bills. The other feeds the ego.",
                "Built my first product in a weekend. Took 6 months to get 10 users. Most people quit at month 2. Don't be most people.",
                "The secret to growing on X? There is no secret. Post daily. Reply to others. Be useful. Do it for a year. You'll be surprised.",
            ],
        },
    },
    "levelsio": {
        "profile": {
            "handle": "levelsio",
            "displayName": "Pieter Levels",
            "avatarUrl": "https://pbs.twimg.com/profile_images/1589756412078555136/YlXMBzhp_400x400.jpg",
            "bio": "Making $3M+/year from startups. Nomad List, Remote OK, PhotoAI, InteriorAI. 12 startups in 12 months. No VC.",
        },
        "items": [
            "Just crossed $300K MRR across all my startups. Still a solo developer. No employees. No meetings. Just shipping.",
            "The best business model: charge money for things. Revolutionary.",
            "AI wrappers are printing money. I don't care if VCs think it's not defensible. My bank account disagrees.",
            "Silicon Valley: 50 person team, $10M raised, pivoting for 3 years. Me: solo, no funding, profitable month 1.",
            "Stop asking for permission. Stop asking for advice. Just ship something and see what happens.",
            "Working from Bali today. Tokyo next week. The laptop lifestyle is real if you build real products.",
            "The trick to staying motivated? Ship something new every month. Momentum compounds.",
            "Every startup guru: 'You need a co-founder.' Me: *laughs in $3M ARR*",
            "My tech stack: vanilla JavaScript, SQLite, one VPS. Total cost: $20/month. Revenue: $250K/month.",
            "Most founders overcomplicate everything. The best products do one thing really well.",
        ],
        "analysis": {
            "styleSnapshot": {
                "tone": "Provocative, confident, minimalist. Often sarcastic with a humble-brag undertone.",
                "typicalLength": "Very short (under 100 characters). Punchy one-liners dominate.",
                "emojiUsage": "Almost never. Lets the words do the work. Occasional 🚀 for launches only.",
                "formattingHabits": "Single-line posts. No threads. No hashtags. Occasionally shares screenshots of revenue.",
            },
            "themes": [
                "Solo entrepreneurship",
                "AI product development",
                "Digital nomad lifestyle",
                "Anti-VC bootstrapping",
                "Radical simplicity in tech",
            ],
            "beliefs": {
                "pushes": [
                    "Ship alone, move fast",
                    "Simple tech beats complex stacks",
                    "Revenue is the only metric that matters",
                    "Location independence is achievable",
                    "AI is a massive opportunity right now",
                ],
                "avoids": [
                    "Venture capital and traditional startup culture",
                    "Hiring and team management",
                    "Complex infrastructure and over-engineering",
                    "Long planning cycles without shipping",
                ],
            },
            "formulas": [
                "Flex revenue/milestone → Minimal context",
                "Hot take → No explanation needed",
                "Comparison (them vs me) → Implicit flex",
                "Simplicity statement → Tech minimalism",
                "Lifestyle update → Proof of freedom",
            ],
            "rationale": {
                "hooks": "Leads with impressive numbers or contrarian takes that demand engagement (agreement or debate).",
                "psychology": "Triggers aspiration (I want that life), controversy (that's wrong!), and curiosity (how does he do it?).",
                "audienceFit": "Resonates with developers dreaming of indie success, remote workers, and VC-skeptics.",
            },
            "exampleContent": [
                "Your startup doesn't need a CTO, CFO, or COO. It needs customers. Get those first.",
                "I built PhotoAI in 2 weeks. It makes $50K/month. Your 6-month roadmap is the problem, not the solution.",
                "Meetings are where productivity goes to die. I haven't had one in 3 years. Revenue is up 400%.",
            ],
        },
    },
}


class FallbackEntry(BaseModel):
    model_config = ConfigDict(frozen=True)

    profile: SourceProfile
    items: Tuple[ContentItem, ...]
    analysis: StructuredAnalysis


class FallbackDataset:
    def __init__(self, entries: Mapping[str, FallbackEntry], rng: Optional[random.Random] = None):
        if not entries:
            raise ValueError("fallback dataset needs at least one entry")
        self._entries = MappingProxyType(dict(entries))
        self._rng = rng or random.Random()

    @classmethod
    def from_raw(cls, raw: Mapping[str, Dict[str, Any]], rng: Optional[random.Random] = None) -> "FallbackDataset":
        entries = {
            handle.lower(): FallbackEntry(
                profile=SourceProfile.model_validate(data["profile"]),
                items=tuple(ContentItem(text=text) for text in data["items"]),
                analysis=StructuredAnalysis.model_validate(data["analysis"]),
            )
            for handle, data in raw.items()
        }
        return cls(entries, rng=rng)

    def get(self, handle: str) -> Optional[FallbackEntry]:
        return self._entries.get(handle.lstrip("@").lower())

    def random_entry(self) -> FallbackEntry:
        return self._entries[self._rng.choice(sorted(self._entries))]

    def handles(self) -> Tuple[str, ...]:
        return tuple(self._entries)

    def __len__(self) -> int:
        return len(self._entries)


fallback_dataset = FallbackDataset.from_raw(DEMO_ACCOUNTS)
