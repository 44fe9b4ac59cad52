from __future__ import annotations

import argparse
from typing import List, Optional

import gymnasium as gym

import blockzone.env  # noqa: F401  (registers NeonDrop-v0)
from blockzone.client import BlockZoneClient


def run_random(episodes: int = 5, seed: Optional[int] = None, max_steps: int = 5000) -> List[int]:
    env = gym.make("NeonDrop-v0", max_episode_steps=max_steps)
    scores: List[int] = []
    obs, info = env.reset(seed=seed)
    for _ in range(episodes):
        done = False
        while not done:
            action = env.action_space.sample()
            obs, reward, terminated, truncated, info = env.step(action)
            done = terminated or truncated
        scores.append(int(info["score"]))
        print(f"Episode {len(scores)}: score={info['score']} lines={info['lines']} level={info['level']}")
        obs, info = env.reset()
    env.close()
    return scores


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(description="Random agent for NeonDrop")
    p.add_argument("--episodes", type=int, default=5)
    p.add_argument("--seed", type=int, default=None)
    p.add_argument("--max-steps", type=int, default=5000)
    p.add_argument("--api", type=str, default=None, help="Submit the best score to this worker URL")
    p.add_argument("--player-id", type=str, default="player_random_agent")
    return p


def main() -> None:
    args = build_parser().parse_args()
    scores = run_random(args.episodes, args.seed, args.max_steps)
    best = max(scores) if scores else 0
    print(f"Random agent best score: {best}")
    if args.api:
        result = BlockZoneClient(args.api).submit_score(args.player_id, best, player_name="RandomAgent")
        print(f"Submitted, rank {result.get('rank')} of {result.get('total_scores')}")


if __name__ == "__main__":  # pragma: no cover
    main()
