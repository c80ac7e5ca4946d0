import asyncio
import json
import os
import sys

# Add project root to path so we can import echowell
sys.path.append(os.getcwd())

from echowell.pipelines.voice import VoiceAnalysisPipeline, analyze_voice_tone


async def main():
    file_path = "sample.webm"
    if len(sys.argv) > 1:
        file_path = sys.argv[1]

    if not os.path.exists(file_path):
        print(f"File '{file_path}' not found. Please provide a path to an audio file.")
        print("Usage: python scripts/analyze_voice.py [path/to/recording.webm]")
        return

    for stage in VoiceAnalysisPipeline.describe():
        print(f"{stage.order}. {stage.name} ({stage.module})")
    print(f"\nReading {file_path}...")
    with open(file_path, "rb") as f:
        audio_bytes = f.read()

    print(f"Analysing {len(audio_bytes)} bytes...")
    result = await analyze_voice_tone(audio_bytes)

    print("\n--- Voice Tone Result ---")
    print(json.dumps(result.to_dict(), indent=2))
    print("-------------------------")


if __name__ == "__main__":
    asyncio.run(main())
