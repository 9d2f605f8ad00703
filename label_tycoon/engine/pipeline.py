"""Project pipeline: recording, release and touring.

Recording projects (single, ep):
  planning   → production  on the first turn after creation, and songs start
                           recording that same turn (songs_per_turn per turn)
  production → marketing   once every song is recorded; an EP's lead single
                           goes out immediately
  marketing  → released    next turn: every remaining song is released

Mini-tours skip marketing: planning → production, then one city per turn,
released after the last city.

Projects are processed in id order. Each recorded song costs one quality
draw; each released song one streaming draw; each release one press-trial
sequence; each tour city one sell-through draw.
"""

from __future__ import annotations

import logging

from label_tycoon.balance import Balance
from label_tycoon.engine.financial import FinancialCalculator
from label_tycoon.engine.ledger import TurnLedger
from label_tycoon.engine.quality import QualityModel
from label_tycoon.models import PROJECT_STAGES, Artist, Project, ProjectStage, Song
from label_tycoon.rng import RNG

logger = logging.getLogger(__name__)


class ProjectPipeline:
    def __init__(self, balance: Balance, rng: RNG) -> None:
        self.balance = balance
        self.rng = rng
        self.quality = QualityModel(balance)
        self.financial = FinancialCalculator(balance)

    def advance(self, ledger: TurnLedger) -> None:
        state = ledger.state
        for project in ledger.store.get_active_recording_projects_for_game(state.id):
            if project.start_turn >= state.current_turn:
                continue  # booked this turn
            artist = ledger.artist(project.artist_id)
            if artist is None:
                logger.warning("project %s has no artist %s; skipped", project.id, project.artist_id)
                continue
            if project.type == "mini_tour":
                self._advance_tour(ledger, project, artist)
            else:
                self._advance_recording(ledger, project, artist)

    # ------------------------------------------------------------------
    # Stage bookkeeping
    # ------------------------------------------------------------------

    def _move(self, ledger: TurnLedger, project: Project, stage: ProjectStage, **patch) -> Project:
        if PROJECT_STAGES.index(stage) < PROJECT_STAGES.index(project.stage):
            raise ValueError(f"Project {project.id} cannot go back from {project.stage} to {stage}")
        logger.debug("project %s %s -> %s", project.id, project.stage, stage)
        return ledger.store.update_project(project.id, {"stage": stage, **patch})

    # ------------------------------------------------------------------
    # Recording projects
    # ------------------------------------------------------------------

    def _advance_recording(self, ledger: TurnLedger, project: Project, artist: Artist) -> None:
        if project.stage == "planning":
            project = self._move(ledger, project, "production")
            ledger.log("project", f'"{project.title}" moved into production', project_id=project.id)

        if project.stage == "production":
            self._record(ledger, project, artist)
            return

        if project.stage == "marketing":
            songs = [s for s in ledger.store.get_songs_for_project(project.id) if not s.is_released]
            boost = self.balance.streaming.lead_single_boost if project.lead_single_released else 1.0
            self._release(ledger, project, artist, sorted(songs, key=lambda s: s.id), boost)
            self._move(ledger, project, "released", released_turn=ledger.state.current_turn)

    def _record(self, ledger: TurnLedger, project: Project, artist: Artist) -> None:
        state = ledger.state
        per_turn = self.balance.project_types[project.type].songs_per_turn
        to_record = min(per_turn, project.song_count - project.songs_created)

        for n in range(project.songs_created + 1, project.songs_created + to_record + 1):
            quality = self.quality.calculate_song_quality(artist, project, self.rng)
            title = project.title if project.song_count == 1 else f"{project.title} (Track {n})"
            song = ledger.store.create_song(Song(
                id=f"{project.id}-s{n}",
                game_id=state.id,
                project_id=project.id,
                artist_id=artist.id,
                title=title,
                quality=quality,
                created_turn=state.current_turn,
            ))
            ledger.log(
                "recording", f'{artist.name} recorded "{song.title}" (quality {quality})',
                artist_id=artist.id, project_id=project.id, song_id=song.id,
            )

        created = project.songs_created + to_record
        if created < project.song_count:
            ledger.store.update_project(project.id, {"songs_created": created})
            return

        project = self._move(ledger, project, "marketing", songs_created=created)
        ledger.log("project", f'"{project.title}" finished recording', project_id=project.id)
        if project.lead_single:
            songs = sorted(ledger.store.get_songs_for_project(project.id), key=lambda s: s.id)
            self._release(ledger, project, artist, songs[:1], 1.0, lead_single=True)
            ledger.store.update_project(project.id, {"lead_single_released": True})

    def _release(
        self,
        ledger: TurnLedger,
        project: Project,
        artist: Artist,
        songs: list[Song],
        boost: float,
        lead_single: bool = False,
    ) -> None:
        state = ledger.state
        released: list[Song] = []
        total_streams = 0

        for song in songs:
            streams = self.financial.calculate_streaming_outcome(
                song.quality, state.playlist_access, state.reputation,
                project.marketing_budget, artist.popularity, self.rng,
            )
            streams = round(streams * boost)
            revenue = self.financial.streaming_revenue(streams)
            released.append(song.model_copy(update={
                "is_released": True,
                "release_turn": state.current_turn,
                "initial_streams": streams,
                "total_streams": song.total_streams + streams,
                "total_revenue": song.total_revenue + revenue,
                "last_turn_streams": streams,
                "last_turn_revenue": revenue,
            }))
            total_streams += streams
            label = "Lead single" if lead_single else "Released"
            ledger.earn(
                revenue, "release", f'{label} "{song.title}": {streams:,} streams',
                artist_id=artist.id, project_id=project.id, song_id=song.id,
            )
        ledger.store.update_songs(released)
        ledger.summary.streams += total_streams

        if not lead_single and project.marketing_budget:
            ledger.spend(
                project.marketing_budget, "marketing_costs", "release",
                f'Release campaign for "{project.title}"', project_id=project.id,
            )

        pickups = self.financial.calculate_press_pickups(
            state.press_access, project.marketing_budget, state.reputation, self.rng,
        )
        ledger.summary.press_pickups += pickups
        if pickups:
            gained = ledger.adjust_reputation(pickups * self.balance.press.reputation_per_pickup, "press")
            ledger.log(
                "release", f'"{project.title}" got {pickups} press pickup(s)',
                amount=gained, project_id=project.id,
            )

        gain = self.financial.popularity_gain(total_streams)
        if gain:
            ledger.adjust_artist(artist, "popularity", gain)

    # ------------------------------------------------------------------
    # Tours
    # ------------------------------------------------------------------

    def _advance_tour(self, ledger: TurnLedger, project: Project, artist: Artist) -> None:
        state = ledger.state
        if project.stage == "planning":
            project = self._move(ledger, project, "production")
            ledger.log("tour", f'"{project.title}" is on the road', project_id=project.id)

        breakdown = self.financial.calculate_tour_revenue(
            project.venue_tier, project.venue_capacity, project.cities,
            artist.popularity, state.reputation, project.marketing_budget, self.rng,
        )
        city = breakdown.cities[project.cities_played]
        ledger.earn(
            city.revenue, "tour",
            f'"{project.title}" city {city.city_number}/{project.cities}: '
            f"{breakdown.sell_through_rate:.0%} sold",
            artist_id=artist.id, project_id=project.id,
        )
        ledger.spend(
            city.costs, "tour_costs", "tour",
            f'"{project.title}" city {city.city_number} costs', project_id=project.id,
        )
        self._apply_show_reaction(ledger, project, artist, breakdown.sell_through_rate)

        played = project.cities_played + 1
        patch = {"cities_played": played, "tour_revenue": project.tour_revenue + city.revenue}
        if played >= project.cities:
            self._move(ledger, project, "released", released_turn=state.current_turn, **patch)
            ledger.log("tour", f'"{project.title}" wrapped after {played} cities', project_id=project.id)
        else:
            ledger.store.update_project(project.id, patch)

    def _apply_show_reaction(self, ledger: TurnLedger, project: Project, artist: Artist, sell_through: float) -> None:
        mood, popularity = self.financial.tour_performance_impact(sell_through, project.venue_capacity)
        mood = ledger.adjust_artist(artist, "mood", mood)
        popularity = ledger.adjust_artist(artist, "popularity", popularity)
        if mood or popularity:
            ledger.log(
                "tour", f"{artist.name} after the show: mood {mood:+d}, popularity {popularity:+d}",
                artist_id=artist.id, project_id=project.id,
            )
